import logging
from typing import Optional

logger = logging.getLogger("leaveflow.client_errors")


def log_client_error(
    status_code: int,
    message: str,
    path: str,
    method: str,
    user_id: Optional[int] = None,
) -> None:
    """Record a 4xx response together with the caller, when known."""
    logger.warning(
        f"{status_code} {method} {path} user={user_id if user_id is not None else '-'}: {message}"
    )
