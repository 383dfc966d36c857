# adoption_app/services/protocols.py
"""
세션 계층이 의존하는 외부 기능(인증 서버, 문서 저장소, 로컬 캐시)의 프로토콜 정의.
실제 구현은 같은 패키지의 Firebase 서비스들이며, 테스트에서는 메모리 기반 대역으로 교체됩니다.
"""
from typing import Any, Callable, Dict, Optional, Protocol, runtime_checkable

# 인증 상태 변경 리스너. 로그인된 subject id 또는 로그아웃 시 None을 받습니다.
AuthStateListener = Callable[[Optional[str]], None]
Unsubscribe = Callable[[], None]


@runtime_checkable
class IdentityProviderProtocol(Protocol):
    """Protocol for the remote identity provider."""

    def sign_up(self, email: str, password: str) -> str:
        """Create a credentialed account and return its subject id."""
        ...

    def sign_in(self, email: str, password: str) -> str:
        """Authenticate and return the subject id."""
        ...

    def sign_out(self) -> None:
        ...

    def subscribe(self, listener: AuthStateListener) -> Unsubscribe:
        """Register a state-change listener; returns a handle that removes it."""
        ...

    def get_id_token(self, force_refresh: bool = False) -> Optional[str]:
        ...

    def close(self) -> None:
        """Release transport resources held by the provider client."""
        ...


@runtime_checkable
class DocumentStoreProtocol(Protocol):
    """Protocol for collection/document-key addressed storage."""

    def get(self, collection_name: str, key: str) -> Optional[Dict[str, Any]]:
        ...

    def set(self, collection_name: str, key: str, data: Dict[str, Any]) -> None:
        ...

    def update(self, collection_name: str, key: str, data: Dict[str, Any]) -> None:
        ...

    def delete(self, collection_name: str, key: str) -> None:
        ...

    def insert(self, collection_name: str, data: Dict[str, Any]) -> str:
        ...


@runtime_checkable
class LocalCacheProtocol(Protocol):
    """Protocol for the single-key local persistent cache."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...
