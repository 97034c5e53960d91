"""
Member Cache Database Models

SQLAlchemy models for the member store.
"""

from sqlalchemy import Integer, String, DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Canonical Base class for all database models."""

    pass


class TimestampMixin:
    """Mixin for timestamp fields."""

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class Member(Base, TimestampMixin):
    """Member account model."""

    __tablename__ = "members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    telephone: Mapped[str] = mapped_column(String(50), nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    gender: Mapped[str] = mapped_column(String(20), nullable=False)

    @classmethod
    def create(cls, username: str, telephone: str, age: int, gender: str) -> "Member":
        """Build a new, not yet persisted member."""
        return cls(username=username, telephone=telephone, age=age, gender=gender)

    def update(self, username: str, telephone: str, age: int, gender: str) -> "Member":
        """Replace every mutable field and return self."""
        self.username = username
        self.telephone = telephone
        self.age = age
        self.gender = gender
        return self

    def __repr__(self) -> str:
        return f"<Member(id={self.id}, username={self.username})>"


__all__ = ["Base", "TimestampMixin", "Member"]
