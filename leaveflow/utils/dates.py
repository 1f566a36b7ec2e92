from datetime import date


def inclusive_days(start: date, end: date) -> int:
    """Number of calendar days in the inclusive range ``start``..``end``."""
    return (end - start).days + 1
