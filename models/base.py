from enum import Enum

from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def enum_column(enum_cls: type[Enum], name: str) -> SQLEnum:
    """
    SQLAlchemy Enum type that stores the lowercase enum values ("pending",
    "approved", ...) and rejects anything outside the enumeration, both
    on bind (validate_strings) and in the database (CHECK constraint).
    """
    return SQLEnum(
        enum_cls,
        name=name,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
        create_constraint=True,
    )
