"""Domain constants and enumerations for validation.

The status vocabulary is closed: status updates are requested by name and
matched case-insensitively against ``EXPENSE_STATUSES`` before reaching the
store.
"""

from enum import Enum
from typing import Optional, Tuple

DRAFT = "Draft"
SUBMITTED = "Submitted"
APPROVED = "Approved"
REJECTED = "Rejected"

EXPENSE_STATUSES: Tuple[str, ...] = (DRAFT, SUBMITTED, APPROVED, REJECTED)
# Non-terminal statuses surfaced on the approval queue
PENDING_STATUSES: Tuple[str, ...] = (DRAFT, SUBMITTED)

DEFAULT_CURRENCY = "GBP"


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"

    @classmethod
    def parse(cls, value: str) -> Optional["ChatRole"]:
        """Map a free-form role string onto the closed set; None if unknown."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


def canonical_status(name: Optional[str]) -> Optional[str]:
    """Return the canonical spelling of ``name`` or None when it is not a status."""
    if not name:
        return None
    lowered = name.strip().lower()
    for status in EXPENSE_STATUSES:
        if status.lower() == lowered:
            return status
    return None
