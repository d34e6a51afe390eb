# engagement/__init__.py

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
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from flask_jwt_extended import JWTManager
import firebase_admin
from firebase_admin import credentials

# - 설정 / 예외
from engagement.core.config import config_by_name
from engagement.core.exceptions import EngagementError

# - API 블루프린트
from engagement.api.likes.routes import likes_bp
from engagement.api.follows.routes import follows_bp
from engagement.api.comments.routes import comments_bp
from engagement.api.notifications.routes import notifications_bp
from engagement.api.content.routes import content_bp

# - 서비스 모듈
from engagement.services.firestore_service import FirestoreGateway
from engagement.services.dispatch import DetachedDispatcher
from engagement.services.edge_store import EdgeStore
from engagement.services.counter_service import CounterService
from engagement.services.account_directory import AccountDirectory
from engagement.services.notification_service import NotificationService
from engagement.api.likes.services import LikeService
from engagement.api.follows.services import FollowService
from engagement.api.comments.services import CommentService
from engagement.api.content.services import ContentService

def create_app(config_name=None, db=None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' / 'testing' / 'production'. 없으면 FLASK_ENV 를 따릅니다.
    :param db: Firestore 클라이언트 호환 객체. 주어지면 firebase_admin 초기화를 건너뜁니다 (테스트용).
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 확장 기능 및 외부 서비스 초기화
    # =====================================================================================
    JWTManager(app)

    if db is None and not firebase_admin._apps:
        cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
        if not cred_path or not os.path.exists(cred_path):
            raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
        cred = credentials.Certificate(cred_path)
        options = {}
        if app.config.get('FIREBASE_PROJECT_ID'):
            options['projectId'] = app.config['FIREBASE_PROJECT_ID']
        firebase_admin.initialize_app(cred, options)

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 5-1. 다른 서비스의 기반이 되는 공용/핵심 서비스 먼저 생성
    try:
        app.services['gateway'] = FirestoreGateway(client=db)
        logging.info("Firestore gateway initialized successfully")
    except Exception as e:
        logging.error(f"Failed to initialize Firestore gateway: {e}")
        raise

    dispatcher = DetachedDispatcher()
    dispatcher.init_app(app)
    app.services['dispatcher'] = dispatcher

    gateway = app.services['gateway']
    app.services['edges'] = EdgeStore(gateway)
    app.services['counters'] = CounterService(gateway)
    app.services['accounts'] = AccountDirectory(gateway)
    app.services['notifications'] = NotificationService(
        gateway=gateway,
        directory=app.services['accounts'],
        edges=app.services['edges']
    )

    # 5-2. 다른 서비스를 주입받아야 하는 도메인 서비스 생성
    app.services['likes'] = LikeService(
        gateway=gateway,
        edges=app.services['edges'],
        counters=app.services['counters'],
        notifications=app.services['notifications'],
        dispatcher=dispatcher
    )
    app.services['follows'] = FollowService(
        gateway=gateway,
        edges=app.services['edges'],
        counters=app.services['counters'],
        notifications=app.services['notifications'],
        directory=app.services['accounts'],
        dispatcher=dispatcher
    )
    app.services['comments'] = CommentService(
        gateway=gateway,
        counters=app.services['counters'],
        notifications=app.services['notifications'],
        directory=app.services['accounts'],
        dispatcher=dispatcher
    )
    app.services['content'] = ContentService(
        gateway=gateway,
        edges=app.services['edges'],
        notifications=app.services['notifications'],
        dispatcher=dispatcher,
        comments=app.services['comments']
    )
    logging.info(f"Engagement services initialized (dispatch mode: {dispatcher.mode})")

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(likes_bp, url_prefix='/api/likes')
    app.register_blueprint(follows_bp, url_prefix='/api/users')
    app.register_blueprint(comments_bp, url_prefix='/api/comments')
    app.register_blueprint(notifications_bp, url_prefix='/api/notifications')
    app.register_blueprint(content_bp, url_prefix='/api/content')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(EngagementError)
    def handle_engagement_error(err):
        if err.status_code >= 500:
            logging.error(f"Engagement error: {err}", exc_info=True)
        response = {"error_code": err.error_code, "message": str(err)}
        return jsonify(response), err.status_code

    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(PermissionError)
    def handle_permission_error(err):
        return jsonify({"error_code": "FORBIDDEN", "message": str(err)}), 403

    @app.errorhandler(ValueError)
    def handle_value_error(err):
        # 경로 조립 오류 등 EngagementError 가 아닌 잘못된 입력
        return jsonify({"error_code": "INVALID_REQUEST", "message": str(err)}), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(err):
        return jsonify({"error_code": err.name.upper().replace(" ", "_"), "message": err.description}), err.code

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
