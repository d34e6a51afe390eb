# engagement/api/comments/services.py

import logging
from typing import Optional, Dict, Any, List

from firebase_admin import firestore

from engagement.core.exceptions import CommentNotFoundError, ContentNotFoundError, InvalidParentError
from engagement.models.comment import Comment
from engagement.models.content_kind import ContentRef, FORUM_THREAD, get_content_kind
from engagement.services.account_directory import AccountDirectory, AuthorCache
from engagement.services.counter_service import CounterService
from engagement.services.dispatch import DetachedDispatcher
from engagement.services.firestore_service import FirestoreGateway
from engagement.services.notification_service import NotificationService, UNTITLED
from engagement.utils.datetime_utils import DateTimeUtils
from engagement.utils.thread_assembler import CommentThread, assemble_thread

logger = logging.getLogger(__name__)

class CommentService:
    """
    댓글(포럼은 답변) 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 댓글 작성/삭제 시 콘텐츠의 댓글 카운터를 같은 배치 안에서 함께 갱신합니다.
    - 답글은 1단계만 허용합니다 (답글에 대한 답글은 InvalidParentError).
    - 루트 댓글을 삭제해도 답글은 지우지 않습니다. 남은 답글은 부모 없는 답글로 표시됩니다.
    """
    def __init__(self, gateway: FirestoreGateway, counters: CounterService, notifications: NotificationService,
                 directory: AccountDirectory, dispatcher: DetachedDispatcher):
        self.gateway = gateway
        self.counters = counters
        self.notifications = notifications
        self.directory = directory
        self.dispatcher = dispatcher

    def _content_ref(self, kind: str, content_id: str) -> ContentRef:
        ref = get_content_kind(kind).ref(content_id)
        ref.comments_path()  # 댓글을 받지 않는 종류면 ValueError
        return ref

    def _load_content(self, ref: ContentRef) -> Dict[str, Any]:
        content = self.gateway.get(self.gateway.doc(*ref.path))
        if content is None:
            raise ContentNotFoundError(f"{ref.kind.label}을(를) 찾을 수 없습니다. (id: {ref.content_id})")
        return content

    def add_comment(self, kind: str, content_id: str, data: Dict[str, Any]) -> str:
        """
        새 댓글(또는 답글)을 작성하고 새 댓글 ID를 반환합니다.

        :param data: author_id, author_name, author_avatar, text, (선택) author_username, parent_id
        """
        ref = self._content_ref(kind, content_id)
        content = self._load_content(ref)
        content_doc_ref = self.gateway.doc(*ref.path)

        parent = None
        parent_id = data.get('parent_id')
        if parent_id:
            parent = self.gateway.get(self.gateway.doc(*ref.comments_path(), parent_id))
            if parent is None:
                raise InvalidParentError(f"답글을 달 댓글이 존재하지 않습니다. (id: {parent_id})")
            if parent.get('parentId'):
                raise InvalidParentError("답글에는 다시 답글을 달 수 없습니다.")

        comment_ref = self.gateway.new_doc(*ref.comments_path())
        new_comment = Comment(
            comment_id=comment_ref.id,
            author_id=data['author_id'],
            author_name=data['author_name'],
            author_avatar=data.get('author_avatar') or '',
            author_username=data.get('author_username'),
            text=data['text'],
            parent_id=parent_id,
        )

        batch = self.gateway.batch()
        batch.set(comment_ref, new_comment.to_firestore())
        self.counters.apply_delta(batch, content_doc_ref, ref.kind.comment_counter_fields, 1)
        if ref.kind is FORUM_THREAD:
            batch.update(content_doc_ref, {'lastActivityAt': new_comment.created_at})
        self.gateway.commit(batch)
        logger.info(f"댓글 작성: {ref.kind.name}:{content_id}/{new_comment.comment_id} by {new_comment.author_id}")

        actor = {"name": new_comment.author_name, "avatar": new_comment.author_avatar}
        snippet = new_comment.text[:50]
        if parent is not None:
            recipient_id = parent.get('authorId')
            message = f'회원님의 댓글에 답글을 남겼습니다: "{snippet}"'
        else:
            recipient_id = content.get(ref.kind.owner_field)
            title = content.get('title') or UNTITLED
            message = f'회원님의 {ref.kind.label} "{title}"에 댓글을 남겼습니다: "{snippet}"'

        if recipient_id and recipient_id != new_comment.author_id:
            self.dispatcher.dispatch(self.notifications.notify_comment, recipient_id, new_comment.author_id,
                                     actor, message, ref.link,
                                     description=f"comment notification {ref.kind.name}:{content_id}")
        return new_comment.comment_id

    def delete_comment(self, kind: str, content_id: str, comment_id: str, requester_id: Optional[str] = None) -> None:
        """
        댓글을 삭제하고 댓글 카운터를 1 감소시킵니다. 답글은 함께 삭제하지 않습니다.

        :param requester_id: 주어지면 댓글 작성자 또는 콘텐츠 작성자만 삭제할 수 있습니다.
        """
        ref = self._content_ref(kind, content_id)
        comment_ref = self.gateway.doc(*ref.comments_path(), comment_id)
        comment = self.gateway.get(comment_ref)
        if comment is None:
            raise CommentNotFoundError(f"삭제할 댓글이 없습니다. (id: {comment_id})")

        content = None
        if requester_id is not None or comment.get('isBestAnswer'):
            content = self._load_content(ref)
        if requester_id is not None:
            allowed = {comment.get('authorId'), content.get(ref.kind.owner_field)}
            if requester_id not in allowed:
                raise PermissionError("댓글을 삭제할 권한이 없습니다.")

        content_doc_ref = self.gateway.doc(*ref.path)
        batch = self.gateway.batch()
        batch.delete(comment_ref)
        self.counters.apply_delta(batch, content_doc_ref, ref.kind.comment_counter_fields, -1)
        if content is not None and content.get('bestAnswerId') == comment_id:
            batch.update(content_doc_ref, {'bestAnswerId': None, 'isResolved': False})
        self.gateway.commit(batch)
        logger.info(f"댓글 삭제: {ref.kind.name}:{content_id}/{comment_id}")

    def get_comments(self, kind: str, content_id: str) -> List[Dict[str, Any]]:
        """댓글을 최신순으로 조회합니다 (평평한 목록)."""
        ref = self._content_ref(kind, content_id)
        query = self.gateway.collection(*ref.comments_path()).order_by('createdAt', direction=firestore.Query.DESCENDING)
        return self.gateway.stream(query)

    def get_thread(self, kind: str, content_id: str, pin_best_answer: Optional[bool] = None,
                   author_cache: Optional[AuthorCache] = None) -> CommentThread:
        """
        댓글 트리를 조립합니다. 작성자 정보는 최신 프로필을 스냅샷 위에 덮어씁니다.

        :param pin_best_answer: None 이면 해결된 포럼 스레드일 때만 채택 답변을 맨 위에 고정합니다.
        :param author_cache: 호출자가 관리하는 작성자 캐시 (여러 화면에서 재사용 가능)
        """
        ref = self._content_ref(kind, content_id)
        if pin_best_answer is None:
            pin_best_answer = ref.kind is FORUM_THREAD and bool(self._load_content(ref).get('isResolved'))

        comments = self.get_comments(kind, content_id)
        try:
            authors = self.directory.resolve_authors((c.get('authorId') for c in comments), author_cache)
        except Exception as e:
            # 최신 프로필을 못 읽어도 스냅샷으로 표시할 수 있습니다.
            logger.warning(f"작성자 정보 조회 실패, 스냅샷 사용: {e}")
            authors = {}
        merged = [AccountDirectory.merge_live_author(c, authors.get(c.get('authorId'))) for c in comments]
        return assemble_thread(merged, pin_best_answer=pin_best_answer)

    def mark_best_answer(self, thread_id: str, reply_id: str, mark: bool = True,
                         requester_id: Optional[str] = None) -> None:
        """
        포럼 스레드의 답변을 채택하거나 채택을 취소합니다. 채택 답변은 스레드당 하나입니다.
        requester_id 가 주어지면 스레드 작성자만 요청할 수 있습니다.
        """
        ref = FORUM_THREAD.ref(thread_id)
        thread = self._load_content(ref)
        if requester_id is not None and thread.get(FORUM_THREAD.owner_field) != requester_id:
            raise PermissionError("스레드 작성자만 답변을 채택할 수 있습니다.")
        thread_doc_ref = self.gateway.doc(*ref.path)
        reply_ref = self.gateway.doc(*ref.comments_path(), reply_id)
        if self.gateway.get(reply_ref) is None:
            raise CommentNotFoundError(f"답변을 찾을 수 없습니다. (id: {reply_id})")

        batch = self.gateway.batch()
        if mark:
            previous_id = thread.get('bestAnswerId')
            if previous_id and previous_id != reply_id:
                previous_ref = self.gateway.doc(*ref.comments_path(), previous_id)
                # 이전 채택 답변이 이미 삭제되었을 수 있으므로 존재할 때만 해제합니다.
                if self.gateway.exists(previous_ref):
                    batch.update(previous_ref, {'isBestAnswer': False})
            batch.update(reply_ref, {'isBestAnswer': True})
            batch.update(thread_doc_ref, {'bestAnswerId': reply_id, 'isResolved': True})
        else:
            batch.update(reply_ref, {'isBestAnswer': False})
            if thread.get('bestAnswerId') == reply_id:
                batch.update(thread_doc_ref, {'bestAnswerId': None, 'isResolved': False})
        self.gateway.commit(batch)
        logger.info(f"채택 답변 {'지정' if mark else '해제'}: {thread_id}/{reply_id} ({DateTimeUtils.now()})")
