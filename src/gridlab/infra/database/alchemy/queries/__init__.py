from . import base


__all__ = ("base",)
