from .connectivity import ConnectivityListener, ConnectivityMonitor
from .inspection_store import ChangeKind, ChangeListener, InspectionStore, StoreChange
from .remote_inspection_api import RemoteInspectionApi

__all__ = [
    "ChangeKind",
    "ChangeListener",
    "ConnectivityListener",
    "ConnectivityMonitor",
    "InspectionStore",
    "RemoteInspectionApi",
    "StoreChange",
]
