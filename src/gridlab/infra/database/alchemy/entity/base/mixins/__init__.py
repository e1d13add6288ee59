from .with_id import WithIDMixin
from .with_time import WithCreatedTimeMixin


__all__ = (
    "WithCreatedTimeMixin",
    "WithIDMixin",
)
