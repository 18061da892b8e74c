# src/errors.py

from typing import Optional


class InvalidInput(ValueError):
    """
    Raised at the boundary when transactions, items or thresholds are
    missing or malformed. `field` names the offending input so the
    caller can fix it and resubmit.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
