# adoption_app/api/auth/services.py
import logging
from typing import Optional

from marshmallow import ValidationError

from adoption_app.api.auth.schemas import SignUpSchema
from adoption_app.models.result import ErrorKind, Result
from adoption_app.models.user import User
from adoption_app.services.protocols import DocumentStoreProtocol, IdentityProviderProtocol, Unsubscribe
from adoption_app.services.session_store import SessionStore

USERS_COLLECTION = 'users'

class AuthService:
    """
    현재 사용자 세션을 관리하는 서비스 클래스.
    인증 서버, 'users' 컬렉션, 로컬 캐시(SessionStore)를 서로 일관되게 유지합니다.
    공개 메서드는 예외를 던지지 않고 Result로 성공/실패를 돌려줍니다.
    """
    def __init__(self,
                 identity_provider: IdentityProviderProtocol,
                 document_store: DocumentStoreProtocol,
                 session_store: SessionStore):
        self.identity_provider = identity_provider
        self.document_store = document_store
        self.session_store = session_store
        self._unsubscribe: Optional[Unsubscribe] = None

    # --- 시작 / 종료 ---
    def start(self):
        """
        1) 로컬 캐시의 세션 레코드를 바로 반영하고 (네트워크 없이 화면을 그릴 수 있도록)
        2) 인증 서버 상태 변경 알림을 구독합니다.
        알림은 캐시 로드보다 나중에 발급된 티켓으로 반영되므로 항상 캐시 값을 덮어씁니다.
        """
        if self._unsubscribe is not None:
            return
        ticket = self.session_store.begin()
        cached_user = self.session_store.load_cached()
        self.session_store.commit(ticket, cached_user)
        self._unsubscribe = self.identity_provider.subscribe(self._on_auth_state_changed)
        logging.info("AuthService started.")

    def stop(self):
        """인증 상태 구독을 해제하고 인증 서버 클라이언트의 연결을 정리합니다."""
        if self._unsubscribe is None:
            return
        self._unsubscribe()
        self._unsubscribe = None
        self.identity_provider.close()
        logging.info("AuthService stopped.")

    # --- 회원가입 / 로그인 ---
    def create_user(self, data: User) -> Result[User]:
        """
        인증 서버에 계정을 만들고 'users/{uid}' 문서를 저장한 뒤 현재 사용자로 설정합니다.

        계정 생성 후 문서 저장이 실패하면 STORE_FAILURE를 반환합니다.
        이 경우 인증 서버의 계정과 로그인 상태는 남아 있지만 세션 슬롯은 채워지지 않습니다.
        """
        ticket = self.session_store.begin()
        try:
            SignUpSchema().load({
                'email': data.email, 'password': data.password,
                'name': data.name, 'phone': data.phone
            })
        except ValidationError as e:
            logging.warning(f"회원가입 입력 검증 실패: {e.messages}")
            return Result.failure(ErrorKind.INVALID_INPUT, str(e.messages), e)

        try:
            uid = self.identity_provider.sign_up(data.email, data.password)
        except Exception as e:
            logging.error(f"Create user error: {e}", exc_info=True)
            return Result.failure(ErrorKind.PROVIDER_REJECTED, "계정을 생성할 수 없습니다.", e)

        user = User(email=data.email, id=uid, name=data.name, phone=data.phone)
        try:
            self.document_store.set(USERS_COLLECTION, uid, user.to_document())
        except Exception as e:
            logging.error(f"사용자 문서 저장 실패, 인증 계정은 생성된 상태입니다 (uid: {uid}): {e}", exc_info=True)
            return Result.failure(ErrorKind.STORE_FAILURE, "사용자 정보를 저장하지 못했습니다.", e)

        self.session_store.commit(ticket, user)
        logging.info(f"회원가입 완료 (uid: {uid})")
        return Result.success(user)

    def login(self, email: str, password: str) -> Result[User]:
        """이메일/비밀번호로 로그인하고 'users' 문서로 현재 사용자를 구성합니다."""
        ticket = self.session_store.begin()
        try:
            uid = self.identity_provider.sign_in(email, password)
        except Exception as e:
            logging.error(f"Login error: {e}", exc_info=True)
            return Result.failure(ErrorKind.PROVIDER_REJECTED, "로그인에 실패했습니다.", e)

        try:
            user_data = self.document_store.get(USERS_COLLECTION, uid)
        except Exception as e:
            logging.error(f"사용자 문서 조회 실패 (uid: {uid}): {e}", exc_info=True)
            return Result.failure(ErrorKind.STORE_FAILURE, "사용자 정보를 불러오지 못했습니다.", e)

        if user_data is None:
            # 인증 계정은 있지만 프로필 문서가 없는 경우. 프로필을 자동으로 만들지 않습니다.
            logging.warning(f"No such user! (uid: {uid})")
            return Result.failure(ErrorKind.MISSING_DOCUMENT, "사용자 문서를 찾을 수 없습니다.")

        user = User.from_document(user_data, uid)
        self.session_store.commit(ticket, user)
        return Result.success(user)

    # --- 정보 수정 / 로그아웃 ---
    def update_user(self, data: User, id: str) -> Result[User]:
        """
        'users/{id}' 문서에 data의 값이 있는 필드를 병합한 뒤, 메모리/캐시의 사용자는 data로 통째로 교체합니다.
        병합된 문서를 다시 읽지 않으므로 data에 없는 필드는 저장소에만 남을 수 있습니다.
        """
        ticket = self.session_store.begin()
        try:
            self.document_store.update(USERS_COLLECTION, id, data.to_document(skip_none=True))
        except Exception as e:
            logging.error(f"Update user error (id: {id}): {e}", exc_info=True)
            return Result.failure(ErrorKind.STORE_FAILURE, "사용자 정보를 수정하지 못했습니다.", e)

        self.session_store.commit(ticket, data)
        return Result.success(data)

    def sign_out_app(self) -> Result[None]:
        """
        인증 서버에서 로그아웃한 뒤 메모리와 캐시의 사용자를 지웁니다.
        로그아웃 호출이 실패하면 로컬 상태는 그대로 둡니다.
        """
        ticket = self.session_store.begin()
        try:
            self.identity_provider.sign_out()
        except Exception as e:
            logging.error(f"Sign out error: {e}", exc_info=True)
            return Result.failure(ErrorKind.PROVIDER_REJECTED, "로그아웃에 실패했습니다.", e)

        self.session_store.commit(ticket, None)
        return Result.success()

    def refresh_session(self) -> Result[str]:
        """ID 토큰을 강제로 갱신합니다. 거절되면 인증 서버 알림을 통해 세션이 종료됩니다."""
        try:
            token = self.identity_provider.get_id_token(force_refresh=True)
        except Exception as e:
            logging.error(f"토큰 갱신 실패: {e}", exc_info=True)
            return Result.failure(ErrorKind.PROVIDER_REJECTED, "세션을 갱신하지 못했습니다.", e)
        if token is None:
            return Result.failure(ErrorKind.NO_ACTIVE_SESSION, "로그인된 세션이 없습니다.")
        return Result.success(token)

    # --- 인증 서버 알림 ---
    def _on_auth_state_changed(self, subject: Optional[str]):
        """인증 서버가 알려 온 상태를 최종 기준으로 메모리와 캐시에 반영합니다."""
        ticket = self.session_store.begin()
        try:
            if subject:
                user_data = self.document_store.get(USERS_COLLECTION, subject)
                if user_data is None:
                    logging.warning(f"No such user! 인증 상태 변경을 반영하지 않습니다 (uid: {subject})")
                    return
                self.session_store.commit(ticket, User.from_document(user_data, subject))
            else:
                self.session_store.commit(ticket, None)
        except Exception as e:
            logging.error(f"Error during authentication state change: {e}", exc_info=True)
