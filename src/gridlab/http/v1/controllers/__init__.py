from .user import UserGridController


__all__ = ("UserGridController",)
