# engagement/services/dispatch.py
"""
주 작업(배치 커밋)이 끝난 뒤 실행되는 부가 작업(알림 쓰기 등)의 실행기.

부가 작업의 실패는 여기서 잡아서 로그만 남기며, 절대 주 작업의 결과로 전파되지 않습니다.
"""
import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

THREAD_MODE = 'thread'
INLINE_MODE = 'inline'


class DetachedDispatcher:
    """
    - thread: 데몬 스레드에서 실행 (호출자를 막지 않음). Flask 앱이 있으면 앱 컨텍스트 안에서 실행합니다.
    - inline: 현재 스레드에서 즉시 실행 (테스트용). 예외 처리 방식은 동일합니다.
    """

    def __init__(self, mode: str = THREAD_MODE, app=None):
        if mode not in (THREAD_MODE, INLINE_MODE):
            raise ValueError(f"지원하지 않는 실행 방식입니다: {mode}")
        self.mode = mode
        self.app = app

    def init_app(self, app) -> None:
        self.app = app
        self.mode = app.config.get('NOTIFICATION_DISPATCH_MODE', self.mode)

    def dispatch(self, fn: Callable[..., Any], *args, description: str = '', **kwargs) -> Optional[threading.Thread]:
        """
        부가 작업을 실행합니다.
        :return: thread 모드에서는 시작된 스레드 (테스트에서 join 용), inline 모드에서는 None
        """
        if self.mode == INLINE_MODE:
            self._run_guarded(fn, args, kwargs, description)
            return None

        thread = threading.Thread(target=self._run_in_context, args=[fn, args, kwargs, description])
        thread.daemon = True  # 메인 프로세스 종료 시 함께 종료
        thread.start()
        return thread

    def _run_in_context(self, fn, args, kwargs, description):
        if self.app is None:
            self._run_guarded(fn, args, kwargs, description)
            return
        with self.app.app_context():
            self._run_guarded(fn, args, kwargs, description)

    @staticmethod
    def _run_guarded(fn, args, kwargs, description):
        try:
            fn(*args, **kwargs)
        except Exception as e:
            logger.warning(f"부가 작업 실패 (무시됨) [{description or getattr(fn, '__name__', fn)}]: {e}", exc_info=True)
