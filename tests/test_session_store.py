from datetime import datetime, timedelta

from core.models import DialogueState
from storage.session_store import SessionStore


def test_save_and_load_round_trip():
    store = SessionStore()
    state = DialogueState(session_id="s1")
    state.update_node(3)
    store.save_state("s1", state)

    loaded = store.load_state("s1")
    assert loaded is not state
    assert loaded.current_node == 3
    assert loaded.visited_nodes == [3]


def test_missing_session_is_none():
    assert SessionStore().load_state("nope") is None


def test_expired_session_is_dropped():
    store = SessionStore(session_ttl=60)
    store.save_state("s1", DialogueState(session_id="s1"))
    store.memory_store["s1"]["expires_at"] = datetime.now() - timedelta(seconds=1)

    assert store.load_state("s1") is None
    assert "s1" not in store.memory_store


def test_list_and_cleanup():
    store = SessionStore()
    store.save_state("a", DialogueState(session_id="a"))
    store.save_state("b", DialogueState(session_id="b"))
    store.memory_store["a"]["expires_at"] = datetime.now() - timedelta(seconds=1)

    assert store.list_sessions() == ["b"]
    assert store.cleanup_expired() == 0


def test_delete_state():
    store = SessionStore()
    store.save_state("a", DialogueState(session_id="a"))

    assert store.delete_state("a")
    assert not store.delete_state("a")


def test_save_drops_expired_sessions():
    store = SessionStore()
    store.save_state("old", DialogueState(session_id="old"))
    store.memory_store["old"]["expires_at"] = datetime.now() - timedelta(seconds=1)

    store.save_state("new", DialogueState(session_id="new"))
    assert list(store.memory_store) == ["new"]
