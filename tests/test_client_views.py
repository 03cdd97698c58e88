# File: /tests/test_client_views.py | Version: 1.0 | Title: View binding states + local applied-view store
from gridbase.client.views import BindingState, LocalViewStore, ViewBinding


def test_binding_tracks_apply_with_token():
    b = ViewBinding()
    assert b.should_write_back() is False  # nothing bound

    token = b.begin_apply("v1")
    assert b.state == BindingState.applying
    assert b.should_write_back() is False
    assert b.finish_apply("someone-else") is False
    assert b.state == BindingState.applying
    assert b.finish_apply(token) is True
    assert b.should_write_back() is True


def test_binding_context_manager_resets_on_error():
    b = ViewBinding()
    try:
        with b.applying("v2"):
            raise RuntimeError("apply failed")
    except RuntimeError:
        pass
    assert b.state == BindingState.idle
    assert b.view_id == "v2"


def test_local_store_roundtrip_and_clear(tmp_path):
    path = tmp_path / "nested" / "views.json"
    store = LocalViewStore(path)
    assert store.get("t1") is None

    store.set("t1", "v1")
    store.set("t2", "v2")
    assert LocalViewStore(path).get("t1") == "v1"

    store.clear("t1")
    assert store.get("t1") is None
    assert store.get("t2") == "v2"


def test_local_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "views.json"
    path.write_text("{not json", encoding="utf-8")
    store = LocalViewStore(path)
    assert store.get("t1") is None
    store.set("t1", "v9")
    assert store.get("t1") == "v9"
