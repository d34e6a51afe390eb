# engagement/models/edges.py
"""
관계(엣지) 레코드: 좋아요와 팔로우.
문서 키 자체가 (대상, 사용자) 쌍의 유일성을 보장하므로 본문은 타임스탬프 정도만 담습니다.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any

from engagement.utils.datetime_utils import DateTimeUtils

class EdgeKind(Enum):
    LIKE = "like"
    FOLLOWER = "follower"    # users/{followee}/followers/{follower}
    FOLLOWING = "following"  # users/{follower}/following/{followee}

@dataclass
class Like:
    """{contentPath}/likes/{userId}"""
    user_id: str
    created_at: datetime = field(default_factory=DateTimeUtils.now)

    def to_firestore(self) -> Dict[str, Any]:
        return {"userId": self.user_id, "createdAt": self.created_at}

@dataclass
class FollowerRecord:
    """팔로우 당하는 쪽에 저장되는 레코드. 피드 렌더링을 위해 팔로워 표시 정보를 함께 저장합니다."""
    follower_id: str
    follower_name: str
    follower_username: str = ''
    follower_avatar: str = ''
    since: datetime = field(default_factory=DateTimeUtils.now)

    def to_firestore(self) -> Dict[str, Any]:
        return {
            "followerId": self.follower_id,
            "followerName": self.follower_name,
            "followerUsername": self.follower_username,
            "followerAvatar": self.follower_avatar,
            "since": self.since,
        }

@dataclass
class FollowingRecord:
    """팔로우 하는 쪽에 저장되는 최소 레코드"""
    following_id: str
    since: datetime = field(default_factory=DateTimeUtils.now)

    def to_firestore(self) -> Dict[str, Any]:
        return {"followingId": self.following_id, "since": self.since}
