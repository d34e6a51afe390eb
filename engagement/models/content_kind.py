# engagement/models/content_kind.py
"""
콘텐츠 종류(게시글, 프로젝트, 포럼 스레드/답글, 댓글)별 설정을 정의하는 디스크립터.

종류마다 따로 만들던 좋아요/댓글 로직을 하나의 엔진으로 합치고,
컬렉션 경로와 카운터 필드 이름, 알림 문구만 여기서 매개변수로 주입합니다.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from engagement.core.exceptions import UnknownContentKindError


@dataclass(frozen=True)
class ContentKind:
    name: str
    collection: str                          # 문서가 들어있는 (하위) 컬렉션 이름
    label: str                               # 알림 문구에 쓰이는 이름
    route_prefix: str                        # 알림 링크 접두사
    like_counter_fields: Tuple[str, ...]     # 좋아요 수를 함께 갱신할 필드들 (레거시 + stats.*)
    like_notification_prefix: str            # 결정적 좋아요 알림 ID 접두사
    parent_collection: Optional[str] = None  # 중첩 종류일 때 부모 컬렉션
    comment_collection: Optional[str] = None
    comment_counter_fields: Tuple[str, ...] = ()
    owner_field: str = 'authorId'

    @property
    def is_nested(self) -> bool:
        return self.parent_collection is not None

    @property
    def accepts_comments(self) -> bool:
        return self.comment_collection is not None

    def ref(self, content_id: str, parent_id: Optional[str] = None) -> 'ContentRef':
        return ContentRef(kind=self, content_id=content_id, parent_id=parent_id)

    def like_notification_id(self, content_id: str, user_id: str) -> str:
        return f"{self.like_notification_prefix}_{content_id}_{user_id}"


@dataclass(frozen=True)
class ContentRef:
    """특정 콘텐츠 문서를 가리키는 참조. 중첩 종류는 parent_id 가 필요합니다."""
    kind: ContentKind
    content_id: str
    parent_id: Optional[str] = None

    def __post_init__(self):
        if not self.content_id:
            raise ValueError("콘텐츠 ID가 비어 있습니다.")
        if self.kind.is_nested and not self.parent_id:
            raise ValueError(f"'{self.kind.name}' 종류는 parent_id 가 필요합니다.")

    @property
    def path(self) -> Tuple[str, ...]:
        if self.kind.is_nested:
            return (self.kind.parent_collection, self.parent_id, self.kind.collection, self.content_id)
        return (self.kind.collection, self.content_id)

    @property
    def link(self) -> str:
        # 중첩 콘텐츠의 알림은 부모 페이지로 연결됩니다.
        target_id = self.parent_id if self.kind.is_nested else self.content_id
        return f"{self.kind.route_prefix}/{target_id}"

    def comments_path(self) -> Tuple[str, ...]:
        if not self.kind.accepts_comments:
            raise ValueError(f"'{self.kind.name}' 종류는 댓글을 지원하지 않습니다.")
        return self.path + (self.kind.comment_collection,)

    def parent_kind(self) -> ContentKind:
        """중첩 종류(댓글/답글)가 달려 있는 부모 콘텐츠의 종류"""
        for kind in CONTENT_KINDS.values():
            if kind.collection == self.kind.parent_collection and kind.comment_collection == self.kind.collection:
                return kind
        raise ValueError(f"'{self.kind.name}' 의 부모 종류가 정의되어 있지 않습니다.")

    def comment_kind(self) -> ContentKind:
        """이 콘텐츠에 달린 댓글을 좋아요할 때 사용하는 종류"""
        for kind in CONTENT_KINDS.values():
            if kind.parent_collection == self.kind.collection and kind.collection == self.kind.comment_collection:
                return kind
        raise ValueError(f"'{self.kind.name}' 의 댓글 종류가 정의되어 있지 않습니다.")


ARTICLE = ContentKind(
    name='article', collection='articles', label='게시글', route_prefix='/blog',
    like_counter_fields=('likes', 'stats.likeCount'), like_notification_prefix='like_article',
    comment_collection='comments', comment_counter_fields=('comments', 'stats.commentCount'),
)
PROJECT = ContentKind(
    name='project', collection='projects', label='프로젝트', route_prefix='/portfolio',
    like_counter_fields=('likes', 'stats.likeCount'), like_notification_prefix='like',
    comment_collection='comments', comment_counter_fields=('comments', 'stats.commentCount'),
)
FORUM_THREAD = ContentKind(
    name='forum_thread', collection='forumThreads', label='스레드', route_prefix='/forum',
    like_counter_fields=('likes', 'stats.likeCount'), like_notification_prefix='like_thread',
    comment_collection='replies', comment_counter_fields=('replies', 'stats.replyCount'),
)
FORUM_REPLY = ContentKind(
    name='forum_reply', collection='replies', parent_collection='forumThreads', label='답변',
    route_prefix='/forum', like_counter_fields=('likes',), like_notification_prefix='like_reply',
)
ARTICLE_COMMENT = ContentKind(
    name='article_comment', collection='comments', parent_collection='articles', label='댓글',
    route_prefix='/blog', like_counter_fields=('likes',), like_notification_prefix='like_comment',
)
PROJECT_COMMENT = ContentKind(
    name='project_comment', collection='comments', parent_collection='projects', label='댓글',
    route_prefix='/portfolio', like_counter_fields=('likes',), like_notification_prefix='like_comment',
)

CONTENT_KINDS: Dict[str, ContentKind] = {
    kind.name: kind
    for kind in (ARTICLE, PROJECT, FORUM_THREAD, FORUM_REPLY, ARTICLE_COMMENT, PROJECT_COMMENT)
}


def get_content_kind(name: str) -> ContentKind:
    """이름으로 콘텐츠 종류를 찾습니다. 등록되지 않은 이름이면 UnknownContentKindError."""
    kind = CONTENT_KINDS.get(name)
    if kind is None:
        raise UnknownContentKindError(f"'{name}'은(는) 지원하지 않는 콘텐츠 종류입니다.")
    return kind
