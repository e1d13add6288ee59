from . import get


__all__ = ("get",)
