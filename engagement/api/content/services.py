# engagement/api/content/services.py
import logging
from typing import Dict, List, Optional, Tuple

from engagement.core.exceptions import ContentNotFoundError, UnknownContentKindError
from engagement.models.content_kind import ContentRef, get_content_kind
from engagement.models.edges import EdgeKind
from engagement.services.dispatch import DetachedDispatcher
from engagement.services.edge_store import EdgeStore
from engagement.services.firestore_service import FirestoreGateway
from engagement.services.notification_service import NotificationService, NOTIFICATIONS_COLLECTION, USERS_COLLECTION

logger = logging.getLogger(__name__)

class ContentService:
    """
    콘텐츠 수명주기 중 참여 엔진이 관여하는 부분만 담당합니다.
    - 게시 알림: 작성자의 팔로워 전원에게 새 콘텐츠 알림을 보냅니다.
    - 삭제: 문서를 먼저 지운 뒤 좋아요 레코드, 결정적 좋아요 알림, 댓글을 최선 노력으로 정리합니다.
      댓글/답글 같은 중첩 종류는 CommentService 로 넘겨 부모 카운터와 함께 지웁니다.
    콘텐츠 작성/수정 자체는 이 서비스의 범위가 아닙니다.
    """
    def __init__(self, gateway: FirestoreGateway, edges: EdgeStore, notifications: NotificationService,
                 dispatcher: DetachedDispatcher, comments=None):
        self.gateway = gateway
        self.edges = edges
        self.notifications = notifications
        self.dispatcher = dispatcher
        self.comments = comments

    def _load(self, ref: ContentRef) -> Dict:
        content = self.gateway.get(self.gateway.doc(*ref.path))
        if content is None:
            raise ContentNotFoundError(f"{ref.kind.label}을(를) 찾을 수 없습니다. (id: {ref.content_id})")
        return content

    @staticmethod
    def _check_owner(ref: ContentRef, content: Dict, requester_id: Optional[str]) -> None:
        if requester_id is not None and content.get(ref.kind.owner_field) != requester_id:
            raise PermissionError(f"{ref.kind.label}의 작성자만 요청할 수 있습니다.")

    def announce_publication(self, kind: str, content_id: str, requester_id: Optional[str] = None,
                             detached: bool = False) -> int:
        """
        새로 게시된 콘텐츠를 작성자의 팔로워에게 알립니다.

        :param detached: True 면 팬아웃을 분리 실행하고 즉시 0 을 반환합니다.
        :return: 저장된 알림 수
        """
        ref = get_content_kind(kind).ref(content_id)
        content = self._load(ref)
        self._check_owner(ref, content, requester_id)

        author_id = content.get(ref.kind.owner_field)
        if not author_id:
            logger.warning(f"작성자 정보가 없는 콘텐츠라 게시 알림을 건너뜁니다: {ref.kind.name}:{content_id}")
            return 0

        if detached:
            self.dispatcher.dispatch(self.notifications.notify_new_content, author_id, ref, content,
                                     description=f"new content fan-out {ref.kind.name}:{content_id}")
            return 0
        return self.notifications.notify_new_content(author_id, ref, content)

    def delete_content(self, kind: str, content_id: str, requester_id: Optional[str] = None,
                       parent_id: Optional[str] = None) -> Dict[str, int]:
        """
        콘텐츠 문서를 삭제하고 딸린 데이터를 정리합니다.

        문서 삭제가 실패하면 예외가 전파되고 아무것도 정리하지 않습니다.
        문서 삭제 이후의 정리는 트랜잭션이 아니며, 도중에 실패하면 남은 데이터는 고아로 남습니다.

        :return: 정리한 항목 수 {'likes', 'notifications', 'comments'}
        """
        ref = get_content_kind(kind).ref(content_id, parent_id)
        if ref.kind.is_nested:
            return self._delete_nested(ref, requester_id)

        content = self._load(ref)
        self._check_owner(ref, content, requester_id)

        self.gateway.delete(self.gateway.doc(*ref.path))
        logger.info(f"콘텐츠 삭제: {ref.kind.name}:{content_id}")

        summary = {'likes': 0, 'notifications': 0, 'comments': 0}
        try:
            summary['likes'], summary['notifications'] = self._delete_likes(ref, content.get(ref.kind.owner_field))
            if ref.kind.accepts_comments:
                comments, likes, notifications = self._delete_comments(ref)
                summary['comments'] = comments
                summary['likes'] += likes
                summary['notifications'] += notifications
        except Exception as e:
            logger.error(f"콘텐츠 정리 중 오류 (남은 데이터는 고아로 남음) {ref.kind.name}:{content_id}: {e}",
                         exc_info=True)
        logger.info(f"콘텐츠 정리 결과 {ref.kind.name}:{content_id}: {summary}")
        return summary

    def _delete_nested(self, ref: ContentRef, requester_id: Optional[str]) -> Dict[str, int]:
        """댓글/답글 삭제. 부모 카운터 감소와 채택 해제는 CommentService 의 배치에서 처리됩니다."""
        if self.comments is None:
            raise UnknownContentKindError(f"'{ref.kind.name}' 종류는 이 경로로 삭제할 수 없습니다.")

        comment = self._load(ref)
        self.comments.delete_comment(ref.parent_kind().name, ref.parent_id, ref.content_id,
                                     requester_id=requester_id)

        summary = {'likes': 0, 'notifications': 0, 'comments': 1}
        try:
            summary['likes'], summary['notifications'] = self._delete_likes(ref, comment.get(ref.kind.owner_field))
        except Exception as e:
            logger.error(f"댓글 정리 중 오류 (남은 데이터는 고아로 남음) {ref.kind.name}:{ref.content_id}: {e}",
                         exc_info=True)
        return summary

    def _delete_likes(self, ref: ContentRef, owner_id: Optional[str]) -> Tuple[int, int]:
        """좋아요 레코드와 작성자에게 남은 결정적 좋아요 알림을 지웁니다. :return: (좋아요 수, 알림 수)"""
        liker_ids = self.edges.list_ids(EdgeKind.LIKE, ref)
        likes = self.gateway.delete_many(self.edges.ref(EdgeKind.LIKE, ref, uid) for uid in liker_ids)

        notifications = 0
        if owner_id:
            notification_refs = [
                self.gateway.doc(USERS_COLLECTION, owner_id, NOTIFICATIONS_COLLECTION,
                                 ref.kind.like_notification_id(ref.content_id, uid))
                for uid in liker_ids if uid != owner_id
            ]
            notifications = self.gateway.delete_many(notification_refs)
        return likes, notifications

    def _delete_comments(self, ref: ContentRef) -> Tuple[int, int, int]:
        """:return: (댓글 수, 댓글 좋아요 수, 댓글 좋아요 알림 수)"""
        comment_kind = ref.comment_kind()
        comments: List[Dict] = self.gateway.stream(self.gateway.collection(*ref.comments_path()))
        likes = notifications = 0
        for comment in comments:
            comment_ref = comment_kind.ref(comment['id'], ref.content_id)
            deleted_likes, deleted_notifications = self._delete_likes(comment_ref, comment.get(comment_kind.owner_field))
            likes += deleted_likes
            notifications += deleted_notifications
        self.gateway.delete_many(self.gateway.doc(*comment_kind.ref(comment['id'], ref.content_id).path)
                                 for comment in comments)
        return len(comments), likes, notifications
