"""bindQL database layer: driver ABCs and the PEP 249 implementation."""
from bindql.driver.base import DatabaseDriver, DriverError, StatementHandle
from bindql.driver.dbapi import DBAPIDriver, DBAPIStatement, SQLiteDriver, convert_placeholders
from bindql.driver.registry import DriverFactory

DriverFactory.register_class("sqlite", SQLiteDriver)

__all__ = [
    "DatabaseDriver",
    "DriverError",
    "StatementHandle",
    "DBAPIDriver",
    "DBAPIStatement",
    "SQLiteDriver",
    "convert_placeholders",
    "DriverFactory",
]
