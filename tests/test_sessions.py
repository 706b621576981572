from datetime import timedelta

import pytest

from common.sessions import DEFAULT_TTL, SessionNotFoundError, SessionStore, ttl_from_settings


def test_create_get_delete():
    store = SessionStore(list, name="demo")
    session = store.create()
    assert store.get(session.session_id).state == []
    assert len(store) == 1
    assert store.delete(session.session_id) is True
    assert store.delete(session.session_id) is False
    with pytest.raises(SessionNotFoundError):
        store.get(session.session_id)


def test_idle_sessions_are_purged():
    store = SessionStore(dict, name="demo", ttl=timedelta(minutes=5))
    stale = store.create()
    stale.last_accessed -= timedelta(minutes=10)
    fresh = store.create()
    assert len(store) == 1
    assert store.get(fresh.session_id) is fresh


@pytest.mark.parametrize(
    "settings, expected",
    [
        ({"session_ttl_minutes": 5}, timedelta(minutes=5)),
        ({"session_ttl_minutes": "bogus"}, DEFAULT_TTL),
        ({"session_ttl_minutes": 0}, DEFAULT_TTL),
        (None, DEFAULT_TTL),
    ],
)
def test_ttl_from_settings(settings, expected):
    assert ttl_from_settings(settings) == expected


def test_each_session_has_its_own_lock():
    store = SessionStore(list, name="demo")
    first, second = store.create(), store.create()
    assert first.lock is not second.lock
    with first.lock:
        assert second.lock.acquire(blocking=False)
        second.lock.release()
        assert not first.lock.acquire(blocking=False)
