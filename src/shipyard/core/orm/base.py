"""Declarative base and type-map for all shipyard ORM models.

Uses SQLAlchemy 2.0 ``DeclarativeBase`` with a ``type_annotation_map``
that maps Python built-in types to portable SA column types.
"""

from __future__ import annotations

import datetime

from sqlalchemy import DateTime, Integer, Text
from sqlalchemy.orm import DeclarativeBase


class ShipyardBase(DeclarativeBase):
    """Shared declarative base for every shipyard table.

    * ``str``   → ``Text``
    * ``int``   → ``Integer``
    * ``datetime.datetime`` → ``DateTime(timezone=True)``
    """

    type_annotation_map = {
        str: Text,
        int: Integer,
        datetime.datetime: DateTime(timezone=True),
    }
