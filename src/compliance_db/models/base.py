"""Declarative base for the assessment tables.

Index names follow the ``ix_<table>_<column>`` form that the initial
migration creates, so autogenerated revisions stay quiet.
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention={"ix": "ix_%(column_0_label)s"})
