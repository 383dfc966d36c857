# adoption_app/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from typing import Optional
import firebase_admin
from firebase_admin import credentials

# - 설정
from adoption_app.core.config import config_by_name

# - 외부 서비스 어댑터
from adoption_app.services.local_cache_service import LocalCacheService
from adoption_app.services.identity_service import FirebaseIdentityService
from adoption_app.services.firestore_service import FirestoreService
from adoption_app.services.storage_service import StorageService
from adoption_app.services.session_store import SessionStore

# - 도메인 서비스 및 컨텍스트
from adoption_app.api.auth.services import AuthService
from adoption_app.api.posts.services import PostService
from adoption_app.context import AuthContext

def create_context(config_name: Optional[str] = None) -> AuthContext:
    """
    세션 컨텍스트 팩토리 함수.
    Firebase를 초기화하고 서비스들을 조립한 뒤, 캐시 로드와 인증 상태 구독을 시작한 컨텍스트를 반환합니다.
    사용이 끝나면 close()를 호출하거나 with 문으로 사용하세요.
    """
    # =====================================================================================
    # 3. 설정 선택 및 로깅
    # =====================================================================================
    config_name = config_name or os.getenv('ADOPTION_ENV', 'development')
    config = config_by_name[config_name]

    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
    )

    # =====================================================================================
    # 4. Firebase 초기화
    # =====================================================================================
    if not firebase_admin._apps:
        cred_path = config.FIREBASE_CREDENTIALS_PATH
        if not cred_path or not os.path.exists(cred_path):
            raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
        cred = credentials.Certificate(cred_path)
        options = {'projectId': config.FIREBASE_PROJECT_ID} if config.FIREBASE_PROJECT_ID else {}
        if config.FIREBASE_STORAGE_BUCKET:
            options['storageBucket'] = config.FIREBASE_STORAGE_BUCKET
        firebase_admin.initialize_app(cred, options)

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 (의존성 주입)
    # =====================================================================================
    # 5-1. 외부 기능 어댑터
    cache = LocalCacheService(config.SESSION_CACHE_PATH)
    identity_provider = FirebaseIdentityService(
        api_key=config.FIREBASE_API_KEY,
        cache=cache,
        storage_key=config.AUTH_STORAGE_KEY,
        timeout=config.REQUEST_TIMEOUT
    )
    document_store = FirestoreService()

    # 이미지 업로드는 선택 기능. 버킷이 없으면 업로드만 비활성화됩니다.
    storage_service = None
    try:
        storage_service = StorageService()
        storage_service.init_app(config)
    except Exception as e:
        logging.warning(f"Failed to initialize storage service: {e}")
        storage_service = None

    # 5-2. 세션 슬롯과 이를 공유하는 도메인 서비스
    session_store = SessionStore(cache, storage_key=config.SESSION_STORAGE_KEY)
    auth_service = AuthService(
        identity_provider=identity_provider,
        document_store=document_store,
        session_store=session_store
    )
    post_service = PostService(
        document_store=document_store,
        session_store=session_store,
        storage_service=storage_service
    )

    # =====================================================================================
    # 6. 컨텍스트 시작 및 반환
    # =====================================================================================
    context = AuthContext(auth_service, post_service, session_store)
    context.open()
    logging.info(f"Auth context created for '{config_name}' environment.")
    return context
