from . import mixins
from .core import Entity


__all__ = ("Entity", "mixins")
