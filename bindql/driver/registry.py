"""Named database drivers.

``Session("sqlite")`` resolves its driver through :class:`DriverFactory`.
Each name maps to a :class:`~bindql.driver.base.DatabaseDriver` subclass;
the session asks the factory for a fresh, unconnected instance and then
calls ``connect`` on it itself.  Names are case-insensitive.

A module for another DB-API package plugs in with one decorator::

    import oracledb

    @DriverFactory.register("oracle")
    class OracleDriver(DBAPIDriver):
        def __init__(self, **connect_kwargs):
            super().__init__(oracledb, **connect_kwargs)

    session = Session("oracle")
    session.connect_string("scott/tiger@orcl")
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, ClassVar

from bindql.driver.base import DatabaseDriver

DriverClass = type[DatabaseDriver]


class DriverFactory:
    """Driver name -> :class:`DatabaseDriver` subclass."""

    _drivers: ClassVar[dict[str, DriverClass]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[DriverClass], DriverClass]:
        """Class decorator form of :meth:`register_class`."""

        def decorator(driver_cls: DriverClass) -> DriverClass:
            cls.register_class(name, driver_cls)
            return driver_cls

        return decorator

    @classmethod
    def register_class(cls, name: str, driver_cls: DriverClass) -> None:
        """Make ``driver_cls`` available as ``name``, replacing any earlier entry."""
        cls._drivers[name.lower()] = driver_cls

    @classmethod
    def unregister(cls, name: str) -> None:
        cls._drivers.pop(name.lower(), None)

    @classmethod
    def create(cls, name: str, **kwargs: Any) -> DatabaseDriver:
        """Build an unconnected driver.

        ``kwargs`` go to the driver constructor; for DB-API drivers they
        become extra arguments of every ``module.connect`` call.

        Raises:
            ValueError: ``name`` was never registered.
        """
        try:
            driver_cls = cls._drivers[name.lower()]
        except KeyError:
            known = ", ".join(cls.registered_drivers()) or "none"
            raise ValueError(f"No database driver named '{name}' (available: {known})") from None
        return driver_cls(**kwargs)

    @classmethod
    def registered_drivers(cls) -> list[str]:
        return sorted(cls._drivers)
