from compost_client.network import NetworkSignal, OfflineSync
from compost_client.offline_queue import MemoryStorage, OfflineQueue

def _event(stop_id):
    return {"stop_id": stop_id, "driver_initials": "AB", "completed": True}

def _sync(online=True, submit=lambda p: True):
    network = NetworkSignal(online=online)
    queue = OfflineQueue(MemoryStorage())
    changes = []
    sync = OfflineSync(queue, network, submit, on_change=lambda: changes.append(queue.pending_count()))
    return network, queue, sync, changes

def test_signal_notifies_on_transitions_only():
    network = NetworkSignal(online=True)
    seen = []
    network.subscribe(seen.append)

    network.set_online(True)
    network.set_online(False)
    network.set_online(False)
    network.set_online(True)
    assert seen == [False, True]

def test_unsubscribe_and_failing_listener():
    network = NetworkSignal(online=False)
    seen = []

    def broken(_):
        raise RuntimeError("listener bug")

    network.subscribe(broken)
    unsubscribe = network.subscribe(seen.append)
    network.set_online(True)
    assert seen == [True]
    assert network.online

    unsubscribe()
    network.set_online(False)
    assert seen == [True]

def test_coming_online_syncs_queue():
    sent = []
    network, queue, sync, _ = _sync(online=False, submit=lambda p: sent.append(p) or True)
    queue.enqueue(_event(1))
    queue.enqueue(_event(2))

    network.set_online(True)

    assert [p["stop_id"] for p in sent] == [1, 2]
    assert queue.pending_count() == 0
    assert sync.pending_count == 0
    assert sync.banner() is None

def test_sync_with_nothing_pending():
    _, _, sync, changes = _sync()
    assert sync.sync() is None
    assert changes == [0]

def test_banner_texts():
    network, queue, sync, _ = _sync(online=False)
    assert sync.banner() == "Offline Mode"

    queue.enqueue(_event(1))
    sync.refresh()
    assert sync.banner() == "Offline Mode - 1 event queued"

    queue.enqueue(_event(2))
    sync.refresh()
    assert sync.banner() == "Offline Mode - 2 events queued"

    network._online = True
    assert sync.banner() == "2 events pending sync"
    sync.syncing = True
    assert sync.banner() == "Syncing 2 events..."

def test_retry_only_when_online_and_pending():
    sent = []
    network, queue, sync, _ = _sync(online=False, submit=lambda p: sent.append(p) or True)
    assert sync.retry() is None

    queue.enqueue(_event(1))
    sync.refresh()
    assert not sync.can_retry
    assert sync.retry() is None
    assert sent == []

    network._online = True
    assert sync.can_retry
    report = sync.retry()
    assert report.cleared
    assert not sync.can_retry

def test_failed_sync_keeps_banner_and_retry():
    network, queue, sync, _ = _sync(online=True, submit=lambda p: False)
    queue.enqueue(_event(1))

    report = sync.sync()
    assert report.failed == 1
    assert sync.pending_count == 1
    assert sync.banner() == "1 event pending sync"
    assert sync.can_retry

def test_close_stops_listening():
    sent = []
    network, queue, sync, _ = _sync(online=False, submit=lambda p: sent.append(p) or True)
    sync.start_polling()
    sync.close()
    queue.enqueue(_event(1))
    network.set_online(True)
    assert sent == []
