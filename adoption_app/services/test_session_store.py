# adoption_app/services/test_session_store.py
"""
세션 저장소(SessionStore) 테스트

사용법: python -m pytest adoption_app/services/test_session_store.py -v
"""
import json
from unittest.mock import MagicMock

from adoption_app.models.user import User
from adoption_app.services.local_cache_service import LocalCacheService
from adoption_app.services.session_store import SessionState, SessionStore


def test_initial_snapshot_is_unknown(session_store):
    snapshot = session_store.snapshot()

    assert snapshot.state is SessionState.UNKNOWN
    assert snapshot.loading
    assert not snapshot.signed
    assert snapshot.user is None


def test_commit_persists_record_without_password(session_store, cache):
    user = User(email="ana@example.com", id="u1", password="secret", name="Ana")

    assert session_store.commit(session_store.begin(), user)

    assert session_store.state is SessionState.AUTHENTICATED
    assert session_store.user.password is None
    record = json.loads(cache.get('user_data'))
    assert record == {'email': "ana@example.com", 'id': "u1", 'name': "Ana", 'phone': None}
    assert SessionStore(cache).load_cached() == User(email="ana@example.com", id="u1", name="Ana")


def test_stale_ticket_is_discarded(session_store, cache):
    """버전 티켓이 오래된 쓰기는 반영되지 않음"""
    older = session_store.begin()
    newer = session_store.begin()

    assert session_store.commit(newer, User(email="new@example.com", id="u2"))
    assert not session_store.commit(older, User(email="old@example.com", id="u1"))

    assert session_store.user.id == "u2"
    assert json.loads(cache.get('user_data'))['id'] == "u2"


def test_commit_none_clears_cache(session_store, cache):
    session_store.commit(session_store.begin(), User(email="ana@example.com", id="u1"))

    session_store.commit(session_store.begin(), None)

    assert session_store.state is SessionState.ANONYMOUS
    assert cache.get('user_data') is None


def test_corrupt_record_is_treated_as_absent(session_store, cache):
    cache.set('user_data', "{not json")
    assert session_store.load_cached() is None

    cache.set('user_data', json.dumps({'name': "no email"}))
    assert session_store.load_cached() is None


def test_listeners_are_notified_and_errors_isolated(session_store):
    seen = []

    def broken(snapshot):
        raise RuntimeError("listener bug")

    session_store.add_listener(broken)
    remove = session_store.add_listener(seen.append)

    session_store.commit(session_store.begin(), User(email="ana@example.com", id="u1"))
    remove()
    session_store.commit(session_store.begin(), None)

    assert len(seen) == 1
    assert seen[0].signed


def test_cache_failure_does_not_fail_commit():
    cache = MagicMock()
    cache.set.side_effect = OSError("disk full")
    store = SessionStore(cache)

    assert store.commit(store.begin(), User(email="ana@example.com", id="u1"))
    assert store.snapshot().signed


def test_record_survives_restart_after_undecodable_cache_file(tmp_path):
    path = tmp_path / 'cache.json'
    path.write_bytes(b'\xff\xfe{"user_data": 1}')
    store = SessionStore(LocalCacheService(str(path)))

    store.commit(store.begin(), User(email="a@b.com", id="u1"))

    restored = SessionStore(LocalCacheService(str(path))).load_cached()
    assert restored == User(email="a@b.com", id="u1")
