from .context import HttpContext, context_from_request


__all__ = (
    "HttpContext",
    "context_from_request",
)
