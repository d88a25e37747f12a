from .inspection_factory import InspectionFactory, validate_inspection_input
from .push_backoff import PushBackoff
from .sync_engine import SyncEngine, SyncReport, SyncState, SyncStatus
from .live_merge_view import ConnectionState, LiveMergeView, MergedView, merge_inspections
from .sse_manager import SSEManager

__all__ = [
    "InspectionFactory",
    "validate_inspection_input",
    "PushBackoff",
    "SyncEngine",
    "SyncReport",
    "SyncState",
    "SyncStatus",
    "ConnectionState",
    "LiveMergeView",
    "MergedView",
    "merge_inspections",
    "SSEManager",
]
