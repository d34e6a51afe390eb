# engagement/models/notification.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional

from engagement.utils.datetime_utils import DateTimeUtils

class NotificationType(Enum):
    """알림 유형을 정의하는 Enum 클래스"""
    LIKE = "like"
    FOLLOW = "follow"
    COMMENT = "comment"
    SYSTEM = "system"

@dataclass
class Notification:
    """
    'users/{recipient_id}/notifications' 하위 컬렉션의 문서 구조를 정의하는 데이터클래스.
    좋아요 알림은 결정적 ID(like_<contentId>_<userId>)를 사용하고, 그 외에는 생성된 ID를 사용합니다.
    """
    notification_id: str
    recipient_id: str      # 알림을 받는 사용자 ID (문서 경로에만 쓰이고 본문에는 저장하지 않음)
    type: NotificationType
    actor_name: str
    content: str           # 사람이 읽을 수 있는 메시지
    actor_avatar: str = ''
    link: Optional[str] = None
    read: bool = False
    created_at: datetime = field(default_factory=DateTimeUtils.now)

    def to_firestore(self) -> Dict[str, Any]:
        return {
            "id": self.notification_id,
            "type": self.type.value,
            "actorName": self.actor_name,
            "actorAvatar": self.actor_avatar,
            "content": self.content,
            "link": self.link,
            "createdAt": self.created_at,
            "read": self.read,
        }
