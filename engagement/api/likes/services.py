# engagement/api/likes/services.py
import logging
from typing import Dict, List, Optional

from engagement.core.exceptions import ContentNotFoundError
from engagement.models.content_kind import ContentRef, get_content_kind
from engagement.models.edges import EdgeKind, Like
from engagement.services.counter_service import CounterService
from engagement.services.dispatch import DetachedDispatcher
from engagement.services.edge_store import EdgeStore
from engagement.services.firestore_service import FirestoreGateway
from engagement.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

class LikeService:
    """
    모든 콘텐츠 종류(게시글, 프로젝트, 포럼 스레드/답글, 댓글)의 좋아요를 처리하는 단일 서비스.
    종류별 차이는 ContentKind 디스크립터(컬렉션 경로, 카운터 필드, 알림 ID 접두사)로만 표현합니다.
    """
    def __init__(self, gateway: FirestoreGateway, edges: EdgeStore, counters: CounterService,
                 notifications: NotificationService, dispatcher: DetachedDispatcher):
        self.gateway = gateway
        self.edges = edges
        self.counters = counters
        self.notifications = notifications
        self.dispatcher = dispatcher

    @staticmethod
    def content_ref(kind: str, content_id: str, parent_id: Optional[str] = None) -> ContentRef:
        return get_content_kind(kind).ref(content_id, parent_id)

    def toggle_like(self, kind: str, content_id: str, user_id: str,
                    actor: Optional[Dict[str, str]] = None, parent_id: Optional[str] = None) -> bool:
        """
        좋아요를 누르거나 취소하고 새 좋아요 상태를 반환합니다.

        1. 좋아요 엣지 존재 여부와 콘텐츠 문서를 읽습니다 (트랜잭션 아님).
        2. 엣지 생성/삭제와 카운터 ±1(레거시 + stats.* 필드)을 하나의 배치에 담아 커밋합니다.
        3. 커밋 후 결정적 ID 좋아요 알림을 생성/삭제하는 작업을 분리 실행합니다 (실패해도 무시).

        1~2단계 실패는 예외로 전파되고 아무것도 반영되지 않습니다.

        :param actor: 알림에 표시할 {'name', 'avatar'} (없으면 프로필 조회)
        :param parent_id: 중첩 콘텐츠(포럼 답글, 댓글)의 부모 ID
        """
        ref = self.content_ref(kind, content_id, parent_id)
        content_doc_ref = self.gateway.doc(*ref.path)

        was_liked = self.edges.exists(EdgeKind.LIKE, ref, user_id)
        content = self.gateway.get(content_doc_ref)
        if content is None:
            raise ContentNotFoundError(f"좋아요할 {ref.kind.label}을(를) 찾을 수 없습니다. (id: {content_id})")

        batch = self.gateway.batch()
        if was_liked:
            self.edges.remove(EdgeKind.LIKE, ref, user_id, batch=batch)
            self.counters.apply_delta(batch, content_doc_ref, ref.kind.like_counter_fields, -1)
        else:
            self.edges.create(EdgeKind.LIKE, ref, user_id, Like(user_id=user_id).to_firestore(), batch=batch)
            self.counters.apply_delta(batch, content_doc_ref, ref.kind.like_counter_fields, 1)
        self.gateway.commit(batch)

        is_liked = not was_liked
        logger.info(f"좋아요 {'추가' if is_liked else '취소'}: {ref.kind.name}:{content_id} by {user_id}")

        owner_id = content.get(ref.kind.owner_field)
        if owner_id and owner_id != user_id:
            if is_liked:
                self.dispatcher.dispatch(self.notifications.notify_like, ref, content, user_id, actor,
                                         description=f"like notification {ref.kind.name}:{content_id}")
            else:
                self.dispatcher.dispatch(self.notifications.retract_like, ref, content, user_id,
                                         description=f"like notification retract {ref.kind.name}:{content_id}")
        return is_liked

    def get_like_status(self, kind: str, content_id: str, user_id: str, parent_id: Optional[str] = None) -> bool:
        """사용자가 해당 콘텐츠에 좋아요를 눌렀는지 확인합니다 (단일 존재 확인)."""
        ref = self.content_ref(kind, content_id, parent_id)
        return self.edges.exists(EdgeKind.LIKE, ref, user_id)

    def get_like_statuses(self, kind: str, content_ids: List[str], user_id: str,
                          parent_id: Optional[str] = None) -> Dict[str, bool]:
        """목록 화면용: 여러 콘텐츠에 대한 좋아요 여부를 한꺼번에 확인합니다."""
        refs = [self.content_ref(kind, content_id, parent_id) for content_id in content_ids]
        statuses = self.edges.exists_many(EdgeKind.LIKE, refs, user_id)
        return {ref.content_id: liked for ref, liked in zip(refs, statuses)}

    def get_like_count(self, kind: str, content_id: str, parent_id: Optional[str] = None) -> int:
        """비정규화 카운터 값을 읽습니다. 첫 번째 필드(레거시)를 기준으로 합니다."""
        ref = self.content_ref(kind, content_id, parent_id)
        content = self.gateway.get(self.gateway.doc(*ref.path))
        if content is None:
            raise ContentNotFoundError(f"{ref.kind.label}을(를) 찾을 수 없습니다. (id: {content_id})")
        return self.counters.read(content, ref.kind.like_counter_fields[0])
