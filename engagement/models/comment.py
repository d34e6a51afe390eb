# engagement/models/comment.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, Optional

from engagement.utils.datetime_utils import DateTimeUtils

@dataclass
class Comment:
    """
    콘텐츠 하위 'comments'(포럼은 'replies') 컬렉션의 문서 구조를 정의하는 데이터클래스.
    작성자 이름/아바타는 작성 시점의 스냅샷이며, 표시할 때 최신 프로필로 덮어씁니다.
    """
    comment_id: str
    author_id: str
    author_name: str
    text: str
    author_avatar: str = ''
    author_username: Optional[str] = None
    parent_id: Optional[str] = None  # 답글인 경우 루트 댓글 ID (1단계만 허용)
    likes: int = 0
    created_at: datetime = field(default_factory=DateTimeUtils.now)

    def to_firestore(self) -> Dict[str, Any]:
        data = {
            "id": self.comment_id,
            "authorId": self.author_id,
            "authorName": self.author_name,
            "authorAvatar": self.author_avatar,
            "text": self.text,
            "likes": self.likes,
            "createdAt": self.created_at,
        }
        # 값이 없는 선택 필드는 저장하지 않습니다.
        if self.author_username:
            data["authorUsername"] = self.author_username
        if self.parent_id:
            data["parentId"] = self.parent_id
        return data
