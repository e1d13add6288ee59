import re
from typing import Any, Final

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass, declared_attr


PASCAL_TO_SNAKE_PATTERN: Final[re.Pattern[str]] = re.compile(r"(?<!^)(?=[A-Z])")

CONVENTION: Final[dict[str, str]] = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_N_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def pascal_to_snake(obj: Any) -> str:
    return PASCAL_TO_SNAKE_PATTERN.sub("_", getattr(obj, "__name__", "")).lower()


class Entity(MappedAsDataclass, DeclarativeBase, init=False):
    metadata = MetaData(naming_convention=CONVENTION)

    @declared_attr.directive
    def __tablename__(self) -> str:
        return f"{pascal_to_snake(self)}s"
