import logging
import threading
from typing import Callable, List, Optional

from compost_client.offline_queue import OfflineQueue, SyncReport

logger = logging.getLogger(__name__)

Listener = Callable[[bool], None]

class NetworkSignal:
    """
    Boolean reachability flag fed by the runtime (UI framework, OS hook, tests).
    Reading it never probes the network; listeners hear about changes only.
    """

    def __init__(self, online: bool = True):
        self._online = online
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    @property
    def online(self) -> bool:
        return self._online

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)
        return unsubscribe

    def on_online(self, callback: Callable[[], None]) -> Callable[[], None]:
        return self.subscribe(lambda online: callback() if online else None)

    def set_online(self, online: bool) -> None:
        with self._lock:
            if online == self._online:
                return
            self._online = online
            listeners = list(self._listeners)
        logger.info("network is now %s", "online" if online else "offline")
        for listener in listeners:
            try:
                listener(online)
            except Exception:
                logger.exception("network listener failed")

class OfflineSync:
    """
    Pending-queue indicator: keeps the pending count fresh, syncs when the
    network comes back, and exposes a manual retry while items are pending.
    """

    def __init__(
        self,
        queue: OfflineQueue,
        network: NetworkSignal,
        submit: Callable[[dict], bool],
        poll_interval: float = 5.0,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self.queue = queue
        self.network = network
        self.submit = submit
        self.poll_interval = poll_interval
        self.on_change = on_change
        self.pending_count = queue.pending_count()
        self.syncing = False
        self._stop = threading.Event()
        self._poller: Optional[threading.Thread] = None
        self._unsubscribe = network.on_online(self.sync)

    def refresh(self) -> int:
        self.pending_count = self.queue.pending_count()
        if self.on_change is not None:
            self.on_change()
        return self.pending_count

    def sync(self) -> Optional[SyncReport]:
        if self.refresh() == 0:
            return None
        self.syncing = True
        try:
            return self.queue.sync_all(self.submit)
        finally:
            self.syncing = False
            self.refresh()

    def retry(self) -> Optional[SyncReport]:
        """Manual "Sync Now"; only offered while something is pending."""
        if not self.can_retry:
            return None
        return self.sync()

    @property
    def can_retry(self) -> bool:
        return self.network.online and not self.syncing and self.pending_count > 0

    def banner(self) -> Optional[str]:
        n = self.pending_count
        events = f"{n} event{'s' if n != 1 else ''}"
        if not self.network.online:
            return f"Offline Mode - {events} queued" if n else "Offline Mode"
        if not n:
            return None
        if self.syncing:
            return f"Syncing {events}..."
        return f"{events} pending sync"

    # ---- periodic refresh of the pending count ----
    def start_polling(self) -> None:
        if self._poller is not None:
            return
        self._stop.clear()

        def loop():
            while not self._stop.wait(self.poll_interval):
                self.refresh()

        self._poller = threading.Thread(target=loop, name="offline-queue-poller", daemon=True)
        self._poller.start()

    def stop_polling(self) -> None:
        self._stop.set()
        if self._poller is not None:
            self._poller.join(timeout=self.poll_interval)
            self._poller = None

    def close(self) -> None:
        self.stop_polling()
        self._unsubscribe()
