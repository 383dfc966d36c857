# adoption_app/conftest.py
"""
테스트 공용 픽스처와 메모리 기반 외부 서비스 대역.
로컬 캐시는 실제 LocalCacheService를 tmp_path 위에서 사용합니다.
"""
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

import pytest

from adoption_app.api.auth.services import AuthService
from adoption_app.api.posts.services import PostService
from adoption_app.context import AuthContext
from adoption_app.models.user import User
from adoption_app.services.identity_service import IdentityProviderError
from adoption_app.services.local_cache_service import LocalCacheService
from adoption_app.services.session_store import SessionStore


class FakeIdentityProvider:
    """Firebase Auth 대역. 실제 서비스처럼 subject가 바뀔 때 구독자에게 동기적으로 알립니다."""

    def __init__(self):
        self.accounts: Dict[str, Dict[str, str]] = {}
        self.subject: Optional[str] = None
        self.listeners: List[Callable[[Optional[str]], None]] = []
        self.fail_sign_out = False
        self.fail_refresh = False
        self.closed = 0
        self._counter = 0

    def register(self, email: str, password: str) -> str:
        """로그인 상태를 바꾸지 않고 계정만 만듭니다."""
        self._counter += 1
        uid = f"uid-{self._counter}"
        self.accounts[email] = {'password': password, 'uid': uid}
        return uid

    def sign_up(self, email: str, password: str) -> str:
        if email in self.accounts:
            raise IdentityProviderError('EMAIL_EXISTS')
        if not password:
            raise IdentityProviderError('MISSING_PASSWORD')
        uid = self.register(email, password)
        self._set_subject(uid)
        return uid

    def sign_in(self, email: str, password: str) -> str:
        account = self.accounts.get(email)
        if account is None or account['password'] != password:
            raise IdentityProviderError('INVALID_LOGIN_CREDENTIALS')
        self._set_subject(account['uid'])
        return account['uid']

    def sign_out(self) -> None:
        if self.fail_sign_out:
            raise IdentityProviderError('NETWORK_REQUEST_FAILED')
        self._set_subject(None)

    def subscribe(self, listener):
        self.listeners.append(listener)
        listener(self.subject)

        def unsubscribe():
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe

    def get_id_token(self, force_refresh: bool = False) -> Optional[str]:
        if self.subject is None:
            return None
        if self.fail_refresh:
            self._set_subject(None)
            raise IdentityProviderError('TOKEN_EXPIRED')
        return f"token-{self.subject}"

    def close(self) -> None:
        self.closed += 1

    def emit(self, subject: Optional[str]) -> None:
        """앱 밖에서 일어난 상태 변경(토큰 만료, 다른 기기 로그아웃 등)을 흉내 냅니다."""
        self.subject = subject
        for listener in list(self.listeners):
            listener(subject)

    def _set_subject(self, subject: Optional[str]) -> None:
        if subject == self.subject:
            return
        self.emit(subject)


class FakeDocumentStore:
    """Firestore 대역. failing에 넣은 작업 이름은 예외를 발생시킵니다."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = defaultdict(dict)
        self.failing = set()
        self.calls: List[str] = []
        self.after_update: Optional[Callable[[str, str, Dict[str, Any]], None]] = None
        self._counter = 0

    def _record(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.failing:
            raise RuntimeError(f"{operation} failed: PERMISSION_DENIED")

    def get(self, collection_name, key):
        self._record('get')
        doc = self.collections[collection_name].get(key)
        return dict(doc) if doc is not None else None

    def set(self, collection_name, key, data):
        self._record('set')
        self.collections[collection_name][key] = dict(data)

    def update(self, collection_name, key, data):
        self._record('update')
        if key not in self.collections[collection_name]:
            raise KeyError(f"No document to update: {collection_name}/{key}")
        self.collections[collection_name][key].update(data)
        # 쓰기는 반영되었지만 응답이 늦게 도착하는 상황을 흉내 냅니다.
        if self.after_update is not None:
            hook, self.after_update = self.after_update, None
            hook(collection_name, key, data)

    def delete(self, collection_name, key):
        self._record('delete')
        self.collections[collection_name].pop(key, None)

    def insert(self, collection_name, data):
        self._record('insert')
        self._counter += 1
        key = f"doc-{self._counter}"
        self.collections[collection_name][key] = dict(data)
        return key


@pytest.fixture
def cache(tmp_path):
    return LocalCacheService(str(tmp_path / 'cache.json'))

@pytest.fixture
def identity():
    return FakeIdentityProvider()

@pytest.fixture
def document_store():
    return FakeDocumentStore()

@pytest.fixture
def session_store(cache):
    return SessionStore(cache, storage_key='user_data')

@pytest.fixture
def auth_service(identity, document_store, session_store):
    return AuthService(identity, document_store, session_store)

@pytest.fixture
def post_service(document_store, session_store):
    return PostService(document_store, session_store)

@pytest.fixture
def context(auth_service, post_service, session_store):
    ctx = AuthContext(auth_service, post_service, session_store)
    ctx.open()
    yield ctx
    ctx.close()

@pytest.fixture
def registered_user(identity, document_store):
    """인증 계정과 users 문서가 모두 있는 사용자 (로그인 전 상태)."""
    uid = identity.register('ana@example.com', 'secret123')
    document_store.collections['users'][uid] = {
        'email': 'ana@example.com', 'id': uid, 'name': 'Ana', 'phone': '11999990000'
    }
    return User(email='ana@example.com', id=uid, name='Ana', phone='11999990000')
