# engagement/core/config.py

import os # 환경 변수를 읽기 위해 사용합니다.

class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # JWT 토큰 서명에 사용되는 키. 토큰 발급은 외부 인증 서비스가 담당하고, 여기서는 검증만 합니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
    # 비워두면 서비스 계정 파일의 프로젝트 ID를 사용합니다.
    FIREBASE_PROJECT_ID = os.getenv('FIREBASE_PROJECT_ID')

    # 알림 같은 부가 쓰기 작업의 실행 방식: 'thread'(백그라운드 스레드) 또는 'inline'(커밋 직후 동기 실행)
    NOTIFICATION_DISPATCH_MODE = os.getenv('NOTIFICATION_DISPATCH_MODE', 'thread')
    # 작성자 프로필 캐시에 보관할 최대 사용자 수
    AUTHOR_CACHE_SIZE = int(os.getenv('AUTHOR_CACHE_SIZE', 256))
    # 알림 목록 조회 시 기본 개수
    NOTIFICATION_PAGE_SIZE = int(os.getenv('NOTIFICATION_PAGE_SIZE', 20))

class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True
    # 개발용 Firebase 프로젝트의 서비스 계정 키 파일 경로
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH')

class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다."""
    TESTING = True
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'testing-secret-key-with-enough-length-for-hs256')
    # 테스트에서는 알림 쓰기가 끝난 뒤 결과를 바로 검사할 수 있도록 동기 실행합니다.
    NOTIFICATION_DISPATCH_MODE = 'inline'

class ProductionConfig(Config):
    """운영 환경 설정 클래스입니다."""
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')

# FLASK_ENV 값에 따라 create_app 함수에서 설정 클래스를 선택하는 데 사용됩니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
