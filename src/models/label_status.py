"""
Label lifecycle status.

Status transitions:
    PENDING -> PRINTED (mark printed)
    PRINTED -> SHIPPED (mark shipped)

DISPATCHED is a legacy value written by older versions of the tool. It is
read and shown as SHIPPED and never produced by a transition.
"""
import enum
from typing import Optional


class LabelStatus(str, enum.Enum):
    """Fulfillment status of an upload record, stored with its original values."""

    PENDING = "pendiente"
    PRINTED = "impreso"
    SHIPPED = "enviado"
    DISPATCHED = "despachado"

    @classmethod
    def parse(cls, value: Optional[str]) -> "LabelStatus":
        """Parse a stored value. Documents without a status are pending."""
        if not value:
            return cls.PENDING
        return cls(value)

    @property
    def effective(self) -> "LabelStatus":
        """Status used for display and counting."""
        if self is LabelStatus.DISPATCHED:
            return LabelStatus.SHIPPED
        return self

    @property
    def next_status(self) -> Optional["LabelStatus"]:
        """The only forward transition offered from this status, if any."""
        return _NEXT_STATUS.get(self)

    @property
    def timestamp_field(self) -> Optional[str]:
        """Record attribute stamped when this status is reached."""
        return _TIMESTAMP_FIELDS.get(self)


_NEXT_STATUS = {
    LabelStatus.PENDING: LabelStatus.PRINTED,
    LabelStatus.PRINTED: LabelStatus.SHIPPED,
}

_TIMESTAMP_FIELDS = {
    LabelStatus.PRINTED: "printed_at",
    LabelStatus.SHIPPED: "shipped_at",
    LabelStatus.DISPATCHED: "dispatched_at",
}


class StatusFilter(str, enum.Enum):
    """Filter tabs of the recent uploads view."""

    ALL = "todos"
    PENDING = "pendiente"
    PRINTED = "impreso"
    SHIPPED = "enviado"

    def matches(self, status: LabelStatus) -> bool:
        if self is StatusFilter.ALL:
            return True
        return status.effective.value == self.value
