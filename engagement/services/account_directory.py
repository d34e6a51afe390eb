# engagement/services/account_directory.py
"""
사용자 프로필 조회/생성 (Account Directory) 와 작성자 정보 캐시.

댓글에 저장된 작성자 이름/아바타는 작성 시점의 스냅샷이라 오래될 수 있습니다.
표시할 때 최신 프로필을 ID로 조회해 스냅샷 위에 덮어쓰며, 조회 결과는 호출자가 수명을 관리하는
AuthorCache 객체에 보관합니다 (모듈 전역 캐시는 두지 않습니다).
"""
import logging
import threading
from collections import OrderedDict
from typing import Any, Dict, Iterable, Optional

from engagement.models.user import DEFAULT_USER_NAME, UserProfile
from engagement.services.firestore_service import FirestoreGateway

logger = logging.getLogger(__name__)

USERS_COLLECTION = 'users'


class AuthorCache:
    """최대 크기가 정해진 LRU 캐시. 요청/화면 단위로 만들어 쓰고 버립니다."""

    def __init__(self, max_size: int = 256):
        if max_size <= 0:
            raise ValueError("캐시 크기는 1 이상이어야 합니다.")
        self.max_size = max_size
        self._items: "OrderedDict[str, UserProfile]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[UserProfile]:
        with self._lock:
            profile = self._items.get(user_id)
            if profile is not None:
                self._items.move_to_end(user_id)
            return profile

    def put(self, profile: UserProfile) -> None:
        with self._lock:
            self._items[profile.user_id] = profile
            self._items.move_to_end(profile.user_id)
            while len(self._items) > self.max_size:
                self._items.popitem(last=False)

    def __contains__(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()


class AccountDirectory:

    def __init__(self, gateway: FirestoreGateway):
        self.gateway = gateway

    def user_ref(self, user_id: str):
        return self.gateway.doc(USERS_COLLECTION, user_id)

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        data = self.gateway.get(self.user_ref(user_id))
        if data is None:
            return None
        return UserProfile.from_firestore(user_id, data)

    def get_or_create_profile(self, user_id: str, defaults: Optional[Dict[str, Any]] = None) -> UserProfile:
        """프로필이 없으면 기본값으로 생성합니다. 카운터는 0 에서 시작합니다."""
        profile = self.get_profile(user_id)
        if profile is not None:
            return profile

        profile = UserProfile.from_firestore(user_id, defaults)
        profile.stats = {"followers": 0, "following": 0}
        self.gateway.set(self.user_ref(user_id), profile.to_firestore())
        logger.info(f"사용자 프로필 생성: {user_id}")
        return profile

    def resolve_authors(self, user_ids: Iterable[str], cache: Optional[AuthorCache] = None) -> Dict[str, UserProfile]:
        """
        여러 작성자의 최신 프로필을 조회합니다. 캐시에 없는 ID만 읽습니다.
        조회에 실패한 작성자는 결과에서 빠지며, 호출자는 스냅샷 값을 그대로 씁니다.
        """
        result: Dict[str, UserProfile] = {}
        for user_id in {uid for uid in user_ids if uid}:
            cached = cache.get(user_id) if cache is not None else None
            if cached is not None:
                result[user_id] = cached
                continue
            profile = self.get_profile(user_id)
            if profile is None:
                continue
            if cache is not None:
                cache.put(profile)
            result[user_id] = profile
        return result

    @staticmethod
    def merge_live_author(comment: Dict[str, Any], profile: Optional[UserProfile]) -> Dict[str, Any]:
        """댓글 스냅샷 위에 최신 프로필 값을 덮어쓴 새 dict 를 반환합니다. 빈 값은 덮어쓰지 않습니다."""
        merged = dict(comment)
        if profile is None:
            return merged
        if profile.name and profile.name != DEFAULT_USER_NAME:
            merged['authorName'] = profile.name
        if profile.avatar:
            merged['authorAvatar'] = profile.avatar
        if profile.username:
            merged['authorUsername'] = profile.username
        return merged
