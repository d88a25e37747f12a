from .http_probe_monitor import HttpConnectivityMonitor
from .manual_monitor import ManualConnectivityMonitor

__all__ = [
    "HttpConnectivityMonitor",
    "ManualConnectivityMonitor",
]
