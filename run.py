# run.py
from dotenv import load_dotenv
import os
import logging
basedir = os.path.abspath(os.path.dirname(__file__))
# 실행 위치와 관계없이 이 파일 옆의 .env 를 패키지 임포트 전에 로드합니다.
load_dotenv(dotenv_path=os.path.join(basedir, '.env'))

from engagement import create_app

app = create_app()
logging.info(f"알림 실행 방식: {app.config.get('NOTIFICATION_DISPATCH_MODE')}")

if __name__ == '__main__':
    host = os.getenv('FLASK_RUN_HOST', '127.0.0.1')
    port = int(os.getenv('FLASK_RUN_PORT', 5000))
    debug = app.config.get('DEBUG', False)
    app.run(host=host, port=port, debug=debug)
