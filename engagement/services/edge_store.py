# engagement/services/edge_store.py
"""
좋아요/팔로우 관계 레코드 저장소 (Edge Store).

레코드의 문서 키가 (대상, 사용자) 쌍이므로 존재 확인은 문서 하나를 읽는 것으로 끝나고,
같은 키로 다시 쓰거나 없는 문서를 지워도 최종 상태는 같습니다(멱등).
Firestore 는 compare-and-swap 을 제공하지 않으므로 존재 여부는 '힌트'로만 쓰고,
그 힌트가 가리키는 작업을 그대로 배치에 담습니다.
"""
from typing import Any, Dict, List, Union

from engagement.models.content_kind import ContentRef
from engagement.models.edges import EdgeKind
from engagement.services.firestore_service import FirestoreGateway

LIKES_COLLECTION = 'likes'
USERS_COLLECTION = 'users'

EdgeSource = Union[ContentRef, str]


class EdgeStore:

    def __init__(self, gateway: FirestoreGateway):
        self.gateway = gateway

    def ref(self, kind: EdgeKind, a: EdgeSource, b: str):
        """
        엣지 문서 참조를 만듭니다.
        - LIKE: a=ContentRef, b=user_id -> {contentPath}/likes/{user_id}
        - FOLLOWER: a=followee_id, b=follower_id -> users/{a}/followers/{b}
        - FOLLOWING: a=follower_id, b=followee_id -> users/{a}/following/{b}
        """
        if kind is EdgeKind.LIKE:
            if not isinstance(a, ContentRef):
                raise TypeError("좋아요 엣지는 ContentRef 가 필요합니다.")
            return self.gateway.doc(*a.path, LIKES_COLLECTION, b)
        if kind is EdgeKind.FOLLOWER:
            return self.gateway.doc(USERS_COLLECTION, a, 'followers', b)
        if kind is EdgeKind.FOLLOWING:
            return self.gateway.doc(USERS_COLLECTION, a, 'following', b)
        raise ValueError(f"알 수 없는 엣지 종류: {kind}")

    def collection(self, kind: EdgeKind, a: EdgeSource):
        if kind is EdgeKind.LIKE:
            return self.gateway.collection(*a.path, LIKES_COLLECTION)
        return self.gateway.collection(USERS_COLLECTION, a, kind.value + 's')

    def exists(self, kind: EdgeKind, a: EdgeSource, b: str) -> bool:
        return self.gateway.exists(self.ref(kind, a, b))

    def exists_many(self, kind: EdgeKind, sources: List[EdgeSource], b: str) -> List[bool]:
        """여러 대상에 대해 같은 사용자의 엣지 존재 여부를 입력 순서대로 반환합니다."""
        # 좋아요 엣지는 문서 ID가 모두 user_id 로 같으므로 ID 가 아닌 참조 단위로 확인합니다.
        return [self.gateway.exists(self.ref(kind, a, b)) for a in sources]

    def create(self, kind: EdgeKind, a: EdgeSource, b: str, payload: Dict[str, Any], batch=None) -> None:
        """엣지를 생성합니다. batch 를 넘기면 배치에 담기만 하고, 없으면 즉시 씁니다."""
        ref = self.ref(kind, a, b)
        if batch is not None:
            batch.set(ref, payload)
        else:
            self.gateway.set(ref, payload)

    def remove(self, kind: EdgeKind, a: EdgeSource, b: str, batch=None) -> None:
        ref = self.ref(kind, a, b)
        if batch is not None:
            batch.delete(ref)
        else:
            self.gateway.delete(ref)

    def list(self, kind: EdgeKind, a: EdgeSource) -> List[Dict[str, Any]]:
        return self.gateway.stream(self.collection(kind, a))

    def list_ids(self, kind: EdgeKind, a: EdgeSource) -> List[str]:
        return [doc['id'] for doc in self.list(kind, a)]

