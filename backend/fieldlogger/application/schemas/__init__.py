from .inspection import InspectionCreate, InspectionSchema, ValidationErrorResponse
from .stream import StreamSnapshot
from .sync import (
    ConnectivityUpdate,
    MergedViewResponse,
    SyncReportSchema,
    SyncRequestAccepted,
    SyncStatusResponse,
)

__all__ = [
    "InspectionCreate",
    "InspectionSchema",
    "ValidationErrorResponse",
    "StreamSnapshot",
    "ConnectivityUpdate",
    "MergedViewResponse",
    "SyncReportSchema",
    "SyncRequestAccepted",
    "SyncStatusResponse",
]
