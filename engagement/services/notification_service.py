# engagement/services/notification_service.py
import logging
import uuid
from typing import Any, Callable, Dict, List, Optional

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from engagement.models.content_kind import ContentRef
from engagement.models.edges import EdgeKind
from engagement.models.notification import Notification, NotificationType
from engagement.models.user import UserProfile
from engagement.services.account_directory import AccountDirectory
from engagement.services.edge_store import EdgeStore
from engagement.services.firestore_service import FirestoreGateway, MAX_BATCH_WRITES

logger = logging.getLogger(__name__)

USERS_COLLECTION = 'users'
NOTIFICATIONS_COLLECTION = 'notifications'
UNTITLED = '제목 없음'

class NotificationService:
    """
    알림 생성(팬아웃)과 조회를 담당하는 공용 서비스 클래스.

    - 좋아요처럼 되돌릴 수 있는 동작은 결정적 ID를 사용합니다. 다시 좋아요를 누르면 같은 문서를 덮어쓰고,
      좋아요를 취소하면 같은 ID로 삭제합니다.
    - 팔로우/댓글/새 글 알림은 생성된 ID를 사용하며, 반대 동작(언팔로우 등)이 일어나도 지우지 않습니다.
    - 자기 자신에게 보내는 알림은 만들지 않습니다.
    """
    def __init__(self, gateway: FirestoreGateway, directory: AccountDirectory, edges: EdgeStore):
        self.gateway = gateway
        self.directory = directory
        self.edges = edges

    def _collection(self, recipient_id: str):
        return self.gateway.collection(USERS_COLLECTION, recipient_id, NOTIFICATIONS_COLLECTION)

    def _ref(self, recipient_id: str, notification_id: str):
        return self.gateway.doc(USERS_COLLECTION, recipient_id, NOTIFICATIONS_COLLECTION, notification_id)

    def _actor(self, actor_id: str, snapshot: Optional[Dict[str, str]]) -> Dict[str, str]:
        """알림에 표시할 행위자 정보. 호출자가 넘긴 스냅샷이 없으면 프로필을 조회합니다."""
        if snapshot and snapshot.get('name'):
            return {"name": snapshot['name'], "avatar": snapshot.get('avatar') or ''}
        profile = self.directory.get_profile(actor_id)
        if profile is None:
            profile = UserProfile(user_id=actor_id)
        return {"name": profile.name, "avatar": profile.avatar}

    def create_notification(self, recipient_id: str, actor_id: str, n_type: NotificationType, content: str,
                            actor: Optional[Dict[str, str]] = None, link: Optional[str] = None,
                            notification_id: Optional[str] = None) -> Optional[str]:
        """
        알림 문서를 users/{recipient_id}/notifications 에 저장합니다.

        :param recipient_id: 알림을 받을 사용자 ID
        :param actor_id: 알림을 유발한 사용자 ID ("system" 가능)
        :param n_type: 알림 유형
        :param content: 표시할 메시지
        :param actor: {'name', 'avatar'} 스냅샷 (없으면 조회)
        :param link: 클릭 시 이동할 경로
        :param notification_id: 결정적 ID. 없으면 새로 생성합니다.
        :return: 저장된 알림 ID, 자기 자신에게 보내는 경우 None
        """
        if not recipient_id or recipient_id == actor_id:
            return None

        if actor_id == "system":
            actor = {"name": "Folio", "avatar": ""}
        else:
            actor = self._actor(actor_id, actor)

        notification = Notification(
            notification_id=notification_id or str(uuid.uuid4()),
            recipient_id=recipient_id,
            type=n_type,
            actor_name=actor['name'],
            actor_avatar=actor['avatar'],
            content=content,
            link=link,
        )
        self.gateway.set(self._ref(recipient_id, notification.notification_id), notification.to_firestore())
        logger.info(f"{n_type.value} 알림 생성 완료: {actor_id} -> {recipient_id} ({notification.notification_id})")
        return notification.notification_id

    # ------------------------------------------------------------------
    # 팬아웃
    # ------------------------------------------------------------------
    def notify_like(self, content_ref: ContentRef, content: Dict[str, Any], actor_id: str,
                    actor: Optional[Dict[str, str]] = None) -> Optional[str]:
        """좋아요 알림을 결정적 ID로 생성(덮어쓰기)합니다. 같은 좋아요가 다시 발생해도 문서는 하나입니다."""
        kind = content_ref.kind
        owner_id = content.get(kind.owner_field)
        title = content.get('title') or (content.get('text') or '')[:40] or UNTITLED
        return self.create_notification(
            recipient_id=owner_id,
            actor_id=actor_id,
            n_type=NotificationType.LIKE,
            content=f'회원님의 {kind.label} "{title}"을(를) 좋아합니다',
            actor=actor,
            link=content_ref.link,
            notification_id=kind.like_notification_id(content_ref.content_id, actor_id),
        )

    def retract_like(self, content_ref: ContentRef, content: Dict[str, Any], actor_id: str) -> None:
        """좋아요 취소 시 같은 결정적 ID의 알림을 삭제합니다. 없는 문서를 지워도 오류가 아닙니다."""
        owner_id = content.get(content_ref.kind.owner_field)
        if not owner_id or owner_id == actor_id:
            return
        notification_id = content_ref.kind.like_notification_id(content_ref.content_id, actor_id)
        self.gateway.delete(self._ref(owner_id, notification_id))
        logger.info(f"좋아요 알림 삭제: {notification_id} (수신자: {owner_id})")

    def notify_follow(self, followee_id: str, follower: UserProfile) -> Optional[str]:
        return self.create_notification(
            recipient_id=followee_id,
            actor_id=follower.user_id,
            n_type=NotificationType.FOLLOW,
            content='회원님을 팔로우하기 시작했습니다',
            actor={"name": follower.name, "avatar": follower.avatar},
            link=f"/user/{follower.username or follower.user_id}",
        )

    def notify_comment(self, recipient_id: str, actor_id: str, actor: Dict[str, str], content: str,
                       link: Optional[str]) -> Optional[str]:
        return self.create_notification(
            recipient_id=recipient_id,
            actor_id=actor_id,
            n_type=NotificationType.COMMENT,
            content=content,
            actor=actor,
            link=link,
        )

    def notify_new_content(self, author_id: str, content_ref: ContentRef, content: Dict[str, Any]) -> int:
        """
        작성자의 팔로워 전원에게 새 콘텐츠 알림을 보냅니다.
        팔로워 목록을 한 번 읽고 팔로워마다 한 번씩 씁니다 (팔로워 수에 비례, 상한 없음).
        한 명에게 실패해도 나머지는 계속 보냅니다.

        :return: 실제로 저장된 알림 수
        """
        follower_ids = self.edges.list_ids(EdgeKind.FOLLOWER, author_id)
        if not follower_ids:
            return 0

        title = content.get('title') or UNTITLED
        # 작성자 정보는 한 번만 확정해서 모든 팔로워 알림에 재사용합니다.
        actor = self._actor(author_id, {"name": content.get('author') or content.get('authorName') or '',
                                        "avatar": content.get('authorAvatar') or ''})

        sent = 0
        for follower_id in follower_ids:
            try:
                created = self.create_notification(
                    recipient_id=follower_id,
                    actor_id=author_id,
                    n_type=NotificationType.SYSTEM,
                    content=f'새 {content_ref.kind.label}을(를) 게시했습니다: "{title}"',
                    actor=actor,
                    link=content_ref.link,
                )
                if created:
                    sent += 1
            except Exception as e:
                logger.warning(f"새 콘텐츠 알림 실패 (수신자: {follower_id}): {e}")
        logger.info(f"새 콘텐츠 알림 {sent}/{len(follower_ids)}건 전송 ({content_ref.kind.name}:{content_ref.content_id})")
        return sent

    # ------------------------------------------------------------------
    # 조회 / 읽음 처리
    # ------------------------------------------------------------------
    def _recent_query(self, user_id: str, limit: int):
        return self._collection(user_id).order_by('createdAt', direction=firestore.Query.DESCENDING).limit(limit)

    def list_notifications(self, user_id: str, limit: int = 20) -> List[Dict[str, Any]]:
        """최신순으로 알림을 조회합니다."""
        return self.gateway.stream(self._recent_query(user_id, limit))

    def unread_count(self, user_id: str) -> int:
        return len(self._unread(user_id))

    def mark_read(self, user_id: str, notification_id: str) -> None:
        self.gateway.update(self._ref(user_id, notification_id), {"read": True})

    def mark_all_read(self, user_id: str) -> int:
        """읽지 않은 알림을 모두 읽음 처리합니다. :return: 처리한 알림 수"""
        unread = self._unread(user_id)
        for start in range(0, len(unread), MAX_BATCH_WRITES):
            batch = self.gateway.batch()
            for doc in unread[start:start + MAX_BATCH_WRITES]:
                batch.update(self._ref(user_id, doc['id']), {"read": True})
            self.gateway.commit(batch)
        return len(unread)

    def subscribe(self, user_id: str, callback: Callable[[List[Dict[str, Any]]], None], limit: int = 20) -> Callable[[], None]:
        """최근 알림에 실시간 리스너를 붙입니다. 반환된 함수를 호출하면 구독이 해제됩니다."""
        return self.gateway.listen(self._recent_query(user_id, limit), callback)

    def _unread(self, user_id: str) -> List[Dict[str, Any]]:
        query = self._collection(user_id).where(filter=FieldFilter('read', '==', False))
        return self.gateway.stream(query)
