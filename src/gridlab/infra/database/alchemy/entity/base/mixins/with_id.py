from sqlalchemy import orm


class WithIDMixin(orm.MappedAsDataclass):
    id: orm.Mapped[int] = orm.mapped_column(
        primary_key=True,
        autoincrement=True,
        sort_order=-1,
        init=False,
    )
