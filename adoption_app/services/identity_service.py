# adoption_app/services/identity_service.py

import json
import logging
import threading
import time
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

import jwt
import requests

from adoption_app.services.protocols import AuthStateListener, LocalCacheProtocol, Unsubscribe

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
SECURE_TOKEN_URL = "https://securetoken.googleapis.com/v1/token"
# 만료 직전의 토큰도 만료된 것으로 보고 미리 갱신합니다 (초)
TOKEN_EXPIRY_MARGIN = 60


class IdentityProviderError(Exception):
    """인증 서버가 요청을 거절했을 때 발생합니다. code는 서버 오류 메시지입니다 (예: EMAIL_EXISTS)."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


@dataclass
class AuthCredentials:
    uid: str
    id_token: str
    refresh_token: str


class FirebaseIdentityService:
    """
    Firebase Authentication REST API(Identity Toolkit)와 통신하는 클래스입니다.
    이메일/비밀번호 가입과 로그인, 로그아웃, ID 토큰 갱신을 담당하고
    로그인 상태가 바뀔 때마다 구독자에게 subject id(또는 None)를 알립니다.

    인증 정보는 로컬 캐시에 보관되어 앱을 재시작해도 세션이 복원됩니다.
    복원은 네트워크 없이 이루어지며, 토큰 유효성은 get_id_token() 호출 시 확인됩니다.
    """

    def __init__(self,
                 api_key: str,
                 cache: Optional[LocalCacheProtocol] = None,
                 storage_key: str = 'auth_credentials',
                 timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.cache = cache
        self.storage_key = storage_key
        self.timeout = timeout
        self.http = session or requests.Session()
        self._credentials: Optional[AuthCredentials] = None
        self._listeners: List[AuthStateListener] = []
        self._lock = threading.RLock()
        self._restored = False

    @property
    def current_subject(self) -> Optional[str]:
        with self._lock:
            self._restore()
            return self._credentials.uid if self._credentials else None

    # --- 계정 생성 / 로그인 / 로그아웃 ---
    def sign_up(self, email: str, password: str) -> str:
        """새 계정을 만들고 로그인 상태로 전환한 뒤 발급된 subject id를 반환합니다."""
        payload = self._post(
            f"{IDENTITY_TOOLKIT_URL}/accounts:signUp",
            body={'email': email, 'password': password, 'returnSecureToken': True}
        )
        return self._apply_sign_in(payload)

    def sign_in(self, email: str, password: str) -> str:
        payload = self._post(
            f"{IDENTITY_TOOLKIT_URL}/accounts:signInWithPassword",
            body={'email': email, 'password': password, 'returnSecureToken': True}
        )
        return self._apply_sign_in(payload)

    def sign_out(self) -> None:
        self._set_credentials(None)
        logging.info("Firebase 인증 세션 로그아웃 완료")

    def close(self) -> None:
        """HTTP 세션의 연결을 정리합니다. 인증 정보와 구독자는 그대로 유지됩니다."""
        self.http.close()

    # --- 상태 변경 구독 ---
    def subscribe(self, listener: AuthStateListener) -> Unsubscribe:
        """
        인증 상태 리스너를 등록합니다. 등록 즉시 현재 상태로 한 번 호출되고,
        이후에는 subject가 바뀔 때마다 호출됩니다.

        :return: 리스너를 해제하는 함수
        """
        with self._lock:
            self._restore()
            self._listeners.append(listener)
            subject = self._credentials.uid if self._credentials else None

        self._call(listener, subject)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # --- 토큰 ---
    def get_id_token(self, force_refresh: bool = False) -> Optional[str]:
        """
        유효한 ID 토큰을 반환합니다. 만료되었거나 force_refresh이면 갱신합니다.
        갱신이 거절되면(리프레시 토큰 만료/폐기) 세션을 종료하고 구독자에게 None을 알린 뒤 예외를 다시 발생시킵니다.
        """
        with self._lock:
            self._restore()
            credentials = self._credentials
        if credentials is None:
            return None
        if not force_refresh and not self._is_expired(credentials.id_token):
            return credentials.id_token
        return self._refresh(credentials)

    def _refresh(self, credentials: AuthCredentials) -> str:
        try:
            payload = self._post(
                SECURE_TOKEN_URL,
                form={'grant_type': 'refresh_token', 'refresh_token': credentials.refresh_token}
            )
        except IdentityProviderError as e:
            logging.warning(f"토큰 갱신이 거절되어 세션을 종료합니다 (uid: {credentials.uid}): {e.code}")
            self._set_credentials(None)
            raise

        refreshed = AuthCredentials(
            uid=payload['user_id'],
            id_token=payload['id_token'],
            refresh_token=payload['refresh_token']
        )
        self._set_credentials(refreshed)
        return refreshed.id_token

    @staticmethod
    def _is_expired(id_token: str) -> bool:
        # 클라이언트에서는 서명을 검증하지 않고 exp 클레임만 읽습니다.
        try:
            claims = jwt.decode(id_token, options={"verify_signature": False, "verify_exp": False})
        except jwt.PyJWTError:
            return True
        exp = claims.get('exp')
        if exp is None:
            return False
        return exp - TOKEN_EXPIRY_MARGIN <= time.time()

    # --- 내부 상태 ---
    def _apply_sign_in(self, payload: Dict[str, Any]) -> str:
        credentials = AuthCredentials(
            uid=payload['localId'],
            id_token=payload['idToken'],
            refresh_token=payload['refreshToken']
        )
        self._set_credentials(credentials)
        return credentials.uid

    def _set_credentials(self, credentials: Optional[AuthCredentials]) -> None:
        with self._lock:
            self._restore()
            previous = self._credentials.uid if self._credentials else None
            self._credentials = credentials
            self._persist(credentials)
            current = credentials.uid if credentials else None
            listeners = list(self._listeners)

        # 리스너는 네트워크 호출을 하므로 잠금 밖에서 실행합니다.
        if previous != current:
            for listener in listeners:
                self._call(listener, current)

    def _persist(self, credentials: Optional[AuthCredentials]) -> None:
        if self.cache is None:
            return
        try:
            if credentials:
                self.cache.set(self.storage_key, json.dumps(asdict(credentials)))
            else:
                self.cache.remove(self.storage_key)
        except Exception as e:
            logging.error(f"인증 정보 로컬 저장 실패: {e}", exc_info=True)

    def _restore(self) -> None:
        """캐시에 남아 있는 인증 정보를 한 번만 읽어 옵니다. 호출자는 잠금을 잡고 있어야 합니다."""
        if self._restored:
            return
        self._restored = True
        if self.cache is None:
            return
        try:
            raw = self.cache.get(self.storage_key)
            if raw:
                self._credentials = AuthCredentials(**json.loads(raw))
                logging.info(f"저장된 인증 세션 복원 (uid: {self._credentials.uid})")
        except Exception as e:
            logging.warning(f"저장된 인증 정보를 읽지 못했습니다 (무시됨): {e}")

    @staticmethod
    def _call(listener: AuthStateListener, subject: Optional[str]) -> None:
        try:
            listener(subject)
        except Exception as e:
            logging.error(f"인증 상태 리스너 실행 중 오류 발생: {e}", exc_info=True)

    def _post(self, url: str, body: Optional[Dict[str, Any]] = None, form: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = self.http.post(
            url,
            params={'key': self.api_key},
            json=body,
            data=form,
            timeout=self.timeout
        )
        if response.status_code != 200:
            # 오류 본문 형식: {"error": {"code": 400, "message": "EMAIL_EXISTS"}}
            try:
                error = response.json().get('error') or {}
                code = error.get('message') or f"HTTP_{response.status_code}"
            except (ValueError, AttributeError):
                code = f"HTTP_{response.status_code}"
            raise IdentityProviderError(code)
        return response.json()
