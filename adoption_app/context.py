# adoption_app/context.py
import logging
from typing import Any, Callable, Dict, List, Optional

from adoption_app.api.auth.services import AuthService
from adoption_app.api.posts.services import PostService
from adoption_app.models.post import Post
from adoption_app.models.result import Result
from adoption_app.models.user import User
from adoption_app.services.session_store import SessionListener, SessionSnapshot, SessionStore

class AuthContext:
    """
    애플리케이션의 나머지 부분이 읽는 단일 진입점.
    {user, signed} 스냅샷과 세션/게시글 작업을 함께 노출합니다.

    스냅샷은 SessionStore가 변경을 반영하는 즉시 동기적으로 갱신되므로,
    변경 작업이 반환된 뒤의 읽기는 항상 그 결과를 봅니다.
    open() 전에는 user=None, signed=False, loading=True 입니다.
    """

    def __init__(self, auth_service: AuthService, post_service: PostService, session_store: SessionStore):
        self.auth_service = auth_service
        self.post_service = post_service
        self.session_store = session_store
        self._snapshot = session_store.snapshot()
        self._listeners: List[SessionListener] = []
        self._remove_store_listener: Optional[Callable[[], None]] = None

    # --- 수명 주기 ---
    def open(self) -> 'AuthContext':
        if self._remove_store_listener is None:
            self._remove_store_listener = self.session_store.add_listener(self._on_session_changed)
            self._snapshot = self.session_store.snapshot()
        self.auth_service.start()
        return self

    def close(self) -> None:
        """인증 상태 구독과 저장소 리스너를 해제합니다. 여러 번 호출해도 안전합니다."""
        self.auth_service.stop()
        if self._remove_store_listener is not None:
            self._remove_store_listener()
            self._remove_store_listener = None

    def __enter__(self) -> 'AuthContext':
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- 읽기 전용 상태 ---
    @property
    def snapshot(self) -> SessionSnapshot:
        return self._snapshot

    @property
    def user(self) -> Optional[User]:
        return self._snapshot.user

    @property
    def signed(self) -> bool:
        return self._snapshot.signed

    @property
    def loading(self) -> bool:
        return self._snapshot.loading

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """세션 스냅샷이 바뀔 때마다 호출될 리스너를 등록합니다 (UI 갱신용)."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _on_session_changed(self, snapshot: SessionSnapshot) -> None:
        self._snapshot = snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logging.error(f"컨텍스트 리스너 실행 중 오류 발생: {e}", exc_info=True)

    # --- 세션 작업 ---
    def create_user(self, data: User) -> Result[User]:
        return self.auth_service.create_user(data)

    def login(self, email: str, password: str) -> Result[User]:
        return self.auth_service.login(email, password)

    def update_user(self, data: User, id: str) -> Result[User]:
        return self.auth_service.update_user(data, id)

    def sign_out_app(self) -> Result[None]:
        return self.auth_service.sign_out_app()

    def refresh_session(self) -> Result[str]:
        return self.auth_service.refresh_session()

    # --- 게시글 작업 ---
    def create_post(self, data: Post) -> Result[str]:
        return self.post_service.create_post(data)

    def edit_post(self, post_id: str, updated_data: Dict[str, Any]) -> Result[None]:
        return self.post_service.edit_post(post_id, updated_data)

    def delete_post(self, post_id: str) -> Result[None]:
        return self.post_service.delete_post(post_id)

    def mark_as_adopted(self, post_id: str) -> Result[None]:
        return self.post_service.mark_as_adopted(post_id)

    def upload_post_image(self, filename: str, data: bytes, content_type: Optional[str] = None) -> Result[str]:
        return self.post_service.upload_post_image(filename, data, content_type)
