import abc
from typing import Any


class Query[C, R](abc.ABC):
    __slots__ = ()

    @abc.abstractmethod
    async def __call__(self, conn: C, /, **kw: Any) -> R:
        raise NotImplementedError
