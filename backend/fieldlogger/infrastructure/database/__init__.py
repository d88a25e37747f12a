from .base import Base
from .session import create_engine_for, create_session_factory, create_tables
from .models import InspectionModel
from .inspection_store import SQLAlchemyInspectionStore

__all__ = [
    "Base",
    "create_engine_for",
    "create_session_factory",
    "create_tables",
    "InspectionModel",
    "SQLAlchemyInspectionStore",
]
