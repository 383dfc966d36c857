# adoption_app/services/session_store.py
"""
현재 사용자 슬롯(메모리 + 로컬 캐시 레코드)을 소유하는 세션 저장소.

로그인, 가입, 정보 수정, 로그아웃, 인증 서버 알림이 모두 같은 슬롯을 바꾸므로
각 변경은 시작 시 begin()으로 버전 티켓을 받고, 결과가 준비되면 commit()합니다.
이미 더 최신 티켓이 반영된 뒤 도착한 commit은 버려집니다.
즉, 먼저 시작했지만 늦게 끝난 쓰기가 나중 상태를 덮어쓰지 못합니다.
"""
import json
import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional

from marshmallow import ValidationError

from adoption_app.api.auth.schemas import SessionRecordSchema
from adoption_app.models.user import User
from adoption_app.services.protocols import LocalCacheProtocol

class SessionState(Enum):
    UNKNOWN = "UNKNOWN"              # 시작 직후, 캐시/인증 서버 결과를 아직 받지 못함
    ANONYMOUS = "ANONYMOUS"
    AUTHENTICATED = "AUTHENTICATED"

@dataclass(frozen=True)
class SessionSnapshot:
    """특정 시점의 세션 상태. signed는 user가 있을 때만 True입니다."""
    state: SessionState = SessionState.UNKNOWN
    user: Optional[User] = None

    @property
    def signed(self) -> bool:
        return self.user is not None

    @property
    def loading(self) -> bool:
        return self.state is SessionState.UNKNOWN

SessionListener = Callable[[SessionSnapshot], None]

class SessionStore:
    def __init__(self, cache: LocalCacheProtocol, storage_key: str = 'user_data'):
        self.cache = cache
        self.storage_key = storage_key
        self._schema = SessionRecordSchema()
        self._lock = threading.RLock()
        self._snapshot = SessionSnapshot()
        self._next_ticket = 0
        self._committed_ticket = 0
        self._listeners: List[SessionListener] = []

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return self._snapshot

    @property
    def user(self) -> Optional[User]:
        return self.snapshot().user

    @property
    def state(self) -> SessionState:
        return self.snapshot().state

    def begin(self) -> int:
        """세션 변경을 시작하며 단조 증가하는 버전 티켓을 발급합니다."""
        with self._lock:
            self._next_ticket += 1
            return self._next_ticket

    def commit(self, ticket: int, user: Optional[User]) -> bool:
        """
        티켓이 마지막으로 반영된 티켓보다 오래되지 않았다면 메모리와 캐시의 사용자를 통째로 교체합니다.

        :param ticket: begin()으로 받은 버전 티켓
        :param user: 새 현재 사용자. None이면 로그아웃 상태
        :return: 반영되었으면 True, 더 최신 변경에 밀려 버려졌으면 False
        """
        with self._lock:
            if ticket < self._committed_ticket:
                logging.info(f"오래된 세션 변경을 버립니다 (ticket: {ticket}, committed: {self._committed_ticket})")
                return False

            if user is not None and user.password is not None:
                user = replace(user, password=None)
            state = SessionState.AUTHENTICATED if user is not None else SessionState.ANONYMOUS
            self._snapshot = SessionSnapshot(state=state, user=user)
            self._committed_ticket = ticket
            self._persist(user)

            # 반영 순서와 알림 순서가 같도록 잠금 안에서 동기적으로 알립니다.
            snapshot = self._snapshot
            for listener in list(self._listeners):
                try:
                    listener(snapshot)
                except Exception as e:
                    logging.error(f"세션 리스너 실행 중 오류 발생: {e}", exc_info=True)
            return True

    def load_cached(self) -> Optional[User]:
        """로컬 캐시의 세션 레코드를 읽습니다. 없거나 읽을 수 없으면 None."""
        try:
            raw = self.cache.get(self.storage_key)
            if not raw:
                return None
            return self._schema.load(json.loads(raw))
        except (ValueError, ValidationError) as e:
            logging.error(f"Failed to load user data from storage: {e}")
            return None
        except Exception as e:
            logging.error(f"Failed to load user data from storage: {e}", exc_info=True)
            return None

    def add_listener(self, listener: SessionListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return remove

    def _persist(self, user: Optional[User]) -> None:
        # 캐시 저장 실패는 기록만 하고 세션 변경 자체는 유지합니다.
        try:
            if user is not None:
                self.cache.set(self.storage_key, json.dumps(self._schema.dump(user), ensure_ascii=False))
            else:
                self.cache.remove(self.storage_key)
        except Exception as e:
            logging.error(f"Failed to save user data to storage: {e}", exc_info=True)
