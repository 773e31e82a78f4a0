from models.entry import TimelineEntryRecord

# Mixins for model composition
from models.mixins import CuidMixin, TimestampMixin

__all__ = [
    # Models
    "TimelineEntryRecord",
    # Mixins
    "CuidMixin",
    "TimestampMixin",
]
