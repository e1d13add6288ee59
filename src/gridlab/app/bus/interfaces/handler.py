import abc
from typing import Any

from gridlab.app.contracts.dto import DTO


class Handler[C, Q: DTO, R](abc.ABC):
    """Answers one query type. The bus builds a fresh handler for every dispatch."""

    __slots__ = ()

    @abc.abstractmethod
    async def __call__(self, context: C, qc: Q, /) -> R: ...


type HandlerType = Handler[Any, Any, Any]
