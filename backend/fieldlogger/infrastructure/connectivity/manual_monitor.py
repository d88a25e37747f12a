"""Connectivity monitor driven by the host's own online/offline notifications."""

from fieldlogger.application.interfaces import ConnectivityMonitor


class ManualConnectivityMonitor(ConnectivityMonitor):
    """The host calls ``set_online`` when the platform reports a change."""

    def __init__(self, initially_online: bool = False) -> None:
        super().__init__(initially_online=initially_online)

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass

    async def set_online(self, online: bool) -> None:
        await self._set_online(online)
