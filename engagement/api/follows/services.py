# engagement/api/follows/services.py
import logging
from typing import Any, Dict, List

from engagement.core.exceptions import UserNotFoundError
from engagement.models.edges import EdgeKind, FollowerRecord, FollowingRecord
from engagement.models.user import UserProfile
from engagement.services.account_directory import AccountDirectory
from engagement.services.counter_service import CounterService
from engagement.services.dispatch import DetachedDispatcher
from engagement.services.edge_store import EdgeStore
from engagement.services.firestore_service import FirestoreGateway
from engagement.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

FOLLOWERS_FIELD = 'stats.followers'
FOLLOWING_FIELD = 'stats.following'

class FollowService:
    """
    팔로우 관계를 관리하는 서비스.

    팔로우 한 건은 두 개의 레코드로 저장됩니다.
    - users/{대상}/followers/{팔로워}: 피드 렌더링용 팔로워 표시 정보 포함
    - users/{팔로워}/following/{대상}: 최소 정보
    두 레코드와 두 카운터(stats.followers, stats.following)는 항상 하나의 배치로 함께 쓰고 지웁니다.
    """
    def __init__(self, gateway: FirestoreGateway, edges: EdgeStore, counters: CounterService,
                 notifications: NotificationService, directory: AccountDirectory,
                 dispatcher: DetachedDispatcher):
        self.gateway = gateway
        self.edges = edges
        self.counters = counters
        self.notifications = notifications
        self.directory = directory
        self.dispatcher = dispatcher

    def get_follow_status(self, target_user_id: str, acting_user_id: str) -> bool:
        """acting_user_id 가 target_user_id 를 팔로우하고 있는지 확인합니다."""
        return self.edges.exists(EdgeKind.FOLLOWER, target_user_id, acting_user_id)

    def toggle_follow(self, target_user_id: str, acting_user_id: str) -> bool:
        """
        팔로우 상태를 뒤집고 새 상태를 반환합니다.
        관찰한 상태는 힌트일 뿐이며, 동시에 같은 토글이 두 번 들어와도 레코드 키가 고정되어 있어 최종 상태는 같습니다.
        """
        if self.get_follow_status(target_user_id, acting_user_id):
            self._write_unfollow(target_user_id, acting_user_id)
            return False
        self._write_follow(target_user_id, acting_user_id)
        return True

    def follow(self, target_user_id: str, acting_user_id: str) -> bool:
        """이미 팔로우 중이면 아무것도 하지 않습니다. :return: 상태가 바뀌었으면 True"""
        if self.get_follow_status(target_user_id, acting_user_id):
            return False
        self._write_follow(target_user_id, acting_user_id)
        return True

    def unfollow(self, target_user_id: str, acting_user_id: str) -> bool:
        """팔로우 중이 아니면 아무것도 하지 않습니다. :return: 상태가 바뀌었으면 True"""
        if not self.get_follow_status(target_user_id, acting_user_id):
            return False
        self._write_unfollow(target_user_id, acting_user_id)
        return True

    def get_followers(self, user_id: str) -> List[Dict[str, Any]]:
        return self.edges.list(EdgeKind.FOLLOWER, user_id)

    def get_following(self, user_id: str) -> List[Dict[str, Any]]:
        return self.edges.list(EdgeKind.FOLLOWING, user_id)

    def _require_profile(self, user_id: str) -> UserProfile:
        profile = self.directory.get_profile(user_id)
        if profile is None:
            raise UserNotFoundError(f"사용자를 찾을 수 없습니다. (id: {user_id})")
        return profile

    def _write_follow(self, target_user_id: str, acting_user_id: str) -> None:
        follower = self._require_profile(acting_user_id)
        self._require_profile(target_user_id)

        record = FollowerRecord(
            follower_id=acting_user_id,
            follower_name=follower.name,
            follower_username=follower.username,
            follower_avatar=follower.avatar,
        )

        batch = self.gateway.batch()
        self.edges.create(EdgeKind.FOLLOWER, target_user_id, acting_user_id, record.to_firestore(), batch=batch)
        self.edges.create(EdgeKind.FOLLOWING, acting_user_id, target_user_id,
                          FollowingRecord(following_id=target_user_id).to_firestore(), batch=batch)
        self.counters.apply_delta(batch, self.directory.user_ref(target_user_id), [FOLLOWERS_FIELD], 1)
        self.counters.apply_delta(batch, self.directory.user_ref(acting_user_id), [FOLLOWING_FIELD], 1)
        self.gateway.commit(batch)
        logger.info(f"팔로우: {acting_user_id} -> {target_user_id}")

        # 팔로우 알림은 생성만 하고 언팔로우해도 지우지 않습니다.
        self.dispatcher.dispatch(self.notifications.notify_follow, target_user_id, follower,
                                 description=f"follow notification {acting_user_id}->{target_user_id}")

    def _write_unfollow(self, target_user_id: str, acting_user_id: str) -> None:
        batch = self.gateway.batch()
        self.edges.remove(EdgeKind.FOLLOWER, target_user_id, acting_user_id, batch=batch)
        self.edges.remove(EdgeKind.FOLLOWING, acting_user_id, target_user_id, batch=batch)
        self.counters.apply_delta(batch, self.directory.user_ref(target_user_id), [FOLLOWERS_FIELD], -1)
        self.counters.apply_delta(batch, self.directory.user_ref(acting_user_id), [FOLLOWING_FIELD], -1)
        self.gateway.commit(batch)
        logger.info(f"언팔로우: {acting_user_id} -> {target_user_id}")
