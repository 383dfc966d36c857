# adoption_app/core/config.py

import os # 환경 변수를 읽기 위해 사용합니다. 값은 패키지 임포트 시 load_dotenv()로 .env에서 채워집니다.

class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # Firebase 웹 앱 설정. Identity Toolkit REST 호출에는 API 키만 사용됩니다.
    FIREBASE_API_KEY = os.getenv('FIREBASE_API_KEY', '')
    FIREBASE_AUTH_DOMAIN = os.getenv('FIREBASE_AUTH_DOMAIN', '')
    FIREBASE_PROJECT_ID = os.getenv('FIREBASE_PROJECT_ID', '')
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET', '')
    FIREBASE_MESSAGING_SENDER_ID = os.getenv('FIREBASE_MESSAGING_SENDER_ID', '')
    FIREBASE_APP_ID = os.getenv('FIREBASE_APP_ID', '')
    FIREBASE_MEASUREMENT_ID = os.getenv('FIREBASE_MEASUREMENT_ID', '')

    # Firestore 접근에 사용할 서비스 계정 키 파일 경로
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')

    # 세션 레코드와 인증 토큰이 저장되는 로컬 캐시 파일. 프로세스를 재시작해도 유지됩니다.
    SESSION_CACHE_PATH = os.getenv(
        'SESSION_CACHE_PATH',
        os.path.join(os.path.expanduser('~'), '.adoption_app', 'cache.json')
    )
    # 캐시 안에서 세션 레코드를 가리키는 고정 키
    SESSION_STORAGE_KEY = 'user_data'
    AUTH_STORAGE_KEY = 'auth_credentials'

    # 외부 인증 서버 요청 타임아웃(초)
    REQUEST_TIMEOUT = float(os.getenv('REQUEST_TIMEOUT', '10'))
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    DEBUG = False
    TESTING = False

class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')
    # 개발용 Firebase 프로젝트의 서비스 계정 키. 없으면 공통 값을 사용합니다.
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH', Config.FIREBASE_CREDENTIALS_PATH)

class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다."""
    TESTING = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')
    SESSION_CACHE_PATH = os.getenv('TEST_SESSION_CACHE_PATH', os.path.join('.pytest_cache', 'session_cache.json'))

class ProductionConfig(Config):
    """배포 환경 설정. 로그는 INFO 이상만 남깁니다."""
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

# ADOPTION_ENV 값에 따라 create_context()가 사용할 설정 클래스를 고릅니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
