from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from leaveflow.models.management import ManagerLink


def active_manager_map(db: Session, on: Optional[date] = None, employee_ids=None) -> Dict[int, int]:
    """Map employee id -> manager id for the links in effect on ``on``."""
    on = on or date.today()
    query = (
        select(ManagerLink.employee_id, ManagerLink.manager_id)
        .where(ManagerLink.start_date <= on)
        .order_by(ManagerLink.employee_id, ManagerLink.start_date, ManagerLink.link_id)
    )
    if employee_ids is not None:
        query = query.where(ManagerLink.employee_id.in_(employee_ids))

    mapping = {}
    for employee_id, manager_id in db.execute(query).all():
        # later rows win
        mapping[employee_id] = manager_id
    return mapping


def team_member_ids(db: Session, manager_id: int, on: Optional[date] = None) -> List[int]:
    """Employees whose active manager is ``manager_id``."""
    candidates = select(ManagerLink.employee_id).where(ManagerLink.manager_id == manager_id)
    mapping = active_manager_map(db, on, employee_ids=candidates)
    return sorted(employee_id for employee_id, current in mapping.items() if current == manager_id)


def is_team_member(db: Session, manager_id: int, employee_id: int, on: Optional[date] = None) -> bool:
    return active_manager_map(db, on, employee_ids=[employee_id]).get(employee_id) == manager_id
