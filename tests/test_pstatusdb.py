from kapistore.pstatusdb import StatusStore, UploadStatus


class _Clock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def _find(store, chunk_id):
    for status in store.get_all():
        if status.chunk_id == chunk_id:
            return status
    return None


def test_set_status():
    store = StatusStore(gc_interval=None)
    assert _find(store, "testchunk") is None
    store.set(UploadStatus(chunk_id="testchunk", current_status=2, file_id="testfile"))
    status = _find(store, "testchunk")
    assert status.chunk_id == "testchunk"
    assert status.file_id == "testfile"
    assert status.current_status == 2

    store.set(UploadStatus(chunk_id="testchunk", current_status=1))
    status = _find(store, "testchunk")
    assert status.current_status == 2
    assert status.file_id == "testfile"

    store.set(
        UploadStatus(
            chunk_id="testchunk", current_status=3, file_id="testfile", error_message="test"
        )
    )
    status = _find(store, "testchunk")
    assert status.current_status == 3
    assert status.file_id == "testfile"
    assert status.error_message == "test"
    assert len(store.get_all()) == 1


def test_set_records_creation_time():
    clock = _Clock(5000.0)
    store = StatusStore(gc_interval=None, clock=clock)
    original = UploadStatus(chunk_id="abc", current_status=0)
    store.set(original)
    assert _find(store, "abc").creation == 5000
    assert original.creation == 0


def test_garbage_collection():
    clock = _Clock()
    store = StatusStore(gc_interval=None, clock=clock)
    store.set(UploadStatus(chunk_id="toBeGarbaged", current_status=2))
    clock.now += 20 * 3600
    store.set(UploadStatus(chunk_id="testchunk", current_status=2))
    assert len(store.get_all()) == 2
    store.delete_expired()
    assert len(store.get_all()) == 2
    clock.now += 10 * 3600
    store.delete_expired()
    remaining = store.get_all()
    assert [s.chunk_id for s in remaining] == ["testchunk"]


def test_background_collection_starts_on_first_set():
    store = StatusStore(gc_interval=3600.0)
    store.set(UploadStatus(chunk_id="fresh", current_status=1))
    assert _find(store, "fresh").current_status == 1