# engagement/models/user.py
from dataclasses import dataclass, field
from typing import Dict, Any, Optional

DEFAULT_USER_NAME = '사용자'

@dataclass
class UserProfile:
    """
    Firestore 'users' 컬렉션의 문서 중 참여 엔진이 사용하는 부분.
    """
    user_id: str
    name: str = DEFAULT_USER_NAME
    username: str = ''
    avatar: str = ''
    stats: Dict[str, int] = field(default_factory=lambda: {"followers": 0, "following": 0})

    @classmethod
    def from_firestore(cls, user_id: str, data: Optional[Dict[str, Any]]) -> 'UserProfile':
        data = data or {}
        stats = data.get('stats') or {}
        return cls(
            user_id=user_id,
            name=data.get('name') or DEFAULT_USER_NAME,
            username=data.get('username') or '',
            avatar=data.get('avatar') or '',
            stats={"followers": int(stats.get('followers', 0)), "following": int(stats.get('following', 0))},
        )

    def to_firestore(self) -> Dict[str, Any]:
        return {"name": self.name, "username": self.username, "avatar": self.avatar, "stats": dict(self.stats)}

    def snapshot(self) -> Dict[str, str]:
        """알림/팔로워 레코드에 비정규화해서 넣는 표시용 정보"""
        return {"name": self.name, "avatar": self.avatar, "username": self.username}
