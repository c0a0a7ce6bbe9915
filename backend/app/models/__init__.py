from models.base import Base, make_engine, make_session_factory
from models.maintenance_event import MaintenanceEventRow

__all__ = [
    "Base",
    "make_engine",
    "make_session_factory",
    "MaintenanceEventRow",
]
