"""SQLAlchemy 2.0 ORM layer for shipyard.

Modules
-------
base        ShipyardBase (declarative base)
session     Engine factory, ShipyardSession, create_schema, begin_write
tables      ReleaseTable, ProcessTable, AppLockTable

Tags:
    shipyard-core, orm, sqlalchemy, declarative

Doc-Types:
    package-overview, module-index
"""

from __future__ import annotations

from shipyard.core.orm.base import ShipyardBase
from shipyard.core.orm.session import (
    ShipyardSession,
    begin_write,
    create_schema,
    create_shipyard_engine,
    shipyard_session_factory,
)
from shipyard.core.orm.tables import AppLockTable, ProcessTable, ReleaseTable

__all__ = [
    "ShipyardBase",
    "ShipyardSession",
    "begin_write",
    "create_schema",
    "create_shipyard_engine",
    "shipyard_session_factory",
    "ReleaseTable",
    "ProcessTable",
    "AppLockTable",
]
