from __future__ import annotations

from typing import Any, ClassVar

from gridlab.app.contracts.manager import TransactionManager
from gridlab.infra.database.alchemy.dao import DAO
from gridlab.infra.database.alchemy.entity import Entity


class UnboundRepository:
    __slots__ = ("_manager",)

    def __init__(self, manager: TransactionManager) -> None:
        self._manager = manager

    @property
    def manager(self) -> TransactionManager:
        return self._manager


class BoundRepository[E: Entity](UnboundRepository):
    """A repository over one entity, declared as `class Repo(BoundRepository[E], entity=E)`."""

    _entity: ClassVar[type[Any]]
    __slots__ = ("_dao",)

    def __init_subclass__(cls, entity: type[E] | None = None, **kw: Any) -> None:
        super().__init_subclass__(**kw)
        if entity is not None:
            cls._entity = entity

        assert hasattr(cls, "_entity"), f"{cls.__name__} is not bound to an entity"

    def __init__(self, manager: TransactionManager, dao: DAO[E] | None = None) -> None:
        super().__init__(manager)
        self._dao = dao or DAO(manager, self.entity)

    @property
    def entity(self) -> type[E]:
        return self._entity
