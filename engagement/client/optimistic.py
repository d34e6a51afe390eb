# engagement/client/optimistic.py
"""
낙관적 업데이트 컨트롤러.

좋아요/팔로우 같은 토글 값을 서버 응답을 기다리지 않고 먼저 바꿔서 보여주고,
서버 호출이 실패하면 이전 값(불리언과 개수)을 정확히 되돌립니다.

    IDLE -> APPLIED_LOCALLY -> CONFIRMED
                            -> ROLLED_BACK (-> IDLE)

같은 키에 대한 호출이 진행 중이면 두 번째 클릭은 무시됩니다.
성공 시 서버가 돌려준 값으로 다시 맞추지 않으며, 다음 전체 새로고침 때 서버 값을 신뢰합니다.
"""
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from engagement.client.api_client import EngagementApiClient

logger = logging.getLogger(__name__)


class MutationState(Enum):
    IDLE = "idle"
    APPLIED_LOCALLY = "applied_locally"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


@dataclass(frozen=True)
class EngagementState:
    """화면에 표시되는 토글 값. active 는 좋아요/팔로우 여부, count 는 좋아요 수/팔로워 수."""
    active: bool
    count: int = 0

    def toggled(self) -> 'EngagementState':
        delta = -1 if self.active else 1
        return EngagementState(active=not self.active, count=max(0, self.count + delta))


@dataclass(frozen=True)
class MutationOutcome:
    key: str
    state: MutationState
    value: EngagementState
    error: Optional[Exception] = None
    ignored: bool = False  # 같은 키의 호출이 진행 중이라 무시된 경우

    @property
    def succeeded(self) -> bool:
        return self.state is MutationState.CONFIRMED


ChangeCallback = Callable[[str, EngagementState, MutationState], None]
ErrorCallback = Callable[[str, Exception], None]


class OptimisticMutationController:

    def __init__(self, client: Optional[EngagementApiClient] = None,
                 on_change: Optional[ChangeCallback] = None,
                 on_error: Optional[ErrorCallback] = None):
        """
        :param client: toggle_like / toggle_follow 에서 사용할 API 클라이언트
        :param on_change: 표시 값이 바뀔 때마다 (key, value, state) 로 호출
        :param on_error: 롤백했을 때 사용자에게 보여줄 오류 알림용으로 (key, error) 로 호출
        """
        self.client = client
        self.on_change = on_change
        self.on_error = on_error
        self._busy = set()
        self._values: Dict[str, EngagementState] = {}
        self._lock = threading.Lock()

    def is_busy(self, key: str) -> bool:
        with self._lock:
            return key in self._busy

    def value_of(self, key: str) -> Optional[EngagementState]:
        """마지막으로 표시한 값"""
        with self._lock:
            return self._values.get(key)

    def toggle(self, key: str, state: EngagementState, server_call: Callable[[], Any]) -> MutationOutcome:
        """
        값을 즉시 뒤집고 서버를 호출합니다. 실패하면 state 로 되돌립니다.
        서버 호출은 재시도하지 않습니다. 사용자가 다시 누르면 새 토글로 처리됩니다.

        :param key: 토글 대상 식별자 (예: 'like:article:abc')
        :param state: 토글 직전의 표시 값
        :param server_call: 서버 작업. 예외가 나면 실패로 봅니다.
        """
        with self._lock:
            if key in self._busy:
                logger.debug(f"진행 중인 요청이 있어 무시합니다: {key}")
                return MutationOutcome(key=key, state=MutationState.IDLE, value=state, ignored=True)
            self._busy.add(key)

        try:
            optimistic = state.toggled()
            try:
                self._publish(key, optimistic, MutationState.APPLIED_LOCALLY)
            except Exception:
                # 표시 콜백이 실패하면 서버를 호출하지 않고 값을 원래대로 둡니다.
                with self._lock:
                    self._values[key] = state
                raise
            try:
                server_call()
            except Exception as e:
                logger.warning(f"서버 반영 실패, 이전 상태로 되돌립니다 ({key}): {e}")
                self._publish(key, state, MutationState.ROLLED_BACK)
                if self.on_error is not None:
                    self.on_error(key, e)
                return MutationOutcome(key=key, state=MutationState.ROLLED_BACK, value=state, error=e)

            self._publish(key, optimistic, MutationState.CONFIRMED)
            return MutationOutcome(key=key, state=MutationState.CONFIRMED, value=optimistic)
        finally:
            with self._lock:
                self._busy.discard(key)

    def toggle_like(self, kind: str, content_id: str, state: EngagementState,
                    parent_id: Optional[str] = None) -> MutationOutcome:
        client = self._require_client()
        key = f"like:{kind}:{parent_id + '/' if parent_id else ''}{content_id}"
        return self.toggle(key, state, lambda: client.toggle_like(kind, content_id, parent_id=parent_id))

    def toggle_follow(self, target_user_id: str, state: EngagementState) -> MutationOutcome:
        client = self._require_client()
        return self.toggle(f"follow:{target_user_id}", state, lambda: client.toggle_follow(target_user_id))

    def _require_client(self) -> EngagementApiClient:
        if self.client is None:
            raise RuntimeError("API 클라이언트가 설정되지 않았습니다.")
        return self.client

    def _publish(self, key: str, value: EngagementState, state: MutationState) -> None:
        with self._lock:
            self._values[key] = value
        if self.on_change is not None:
            self.on_change(key, value, state)
