import uuid as uuid_lib

from sqlalchemy import Integer, Sequence, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, declared_attr


class Base(DeclarativeBase):
    id: Mapped[int] = mapped_column(Integer, Sequence("id_seq", start=1000), primary_key=True)
    uuid: Mapped[uuid_lib.UUID] = mapped_column(Uuid, default=uuid_lib.uuid4, unique=True, nullable=False)

    @declared_attr
    def __tablename__(self) -> str:
        return self.__name__.lower()
