# engagement/services/firestore_service.py
"""
Firestore 접근을 감싸는 게이트웨이 (Document Store Adapter).

- 문서 경로 조립, 단건 읽기/쓰기, 원자적 배치 커밋, Increment 변환, 스냅샷 리스너를 제공합니다.
- 백엔드 장애(GoogleAPICallError, RetryError)는 한 번 로그를 남기고 StoreUnavailableError 로 바꿔 올립니다.
- 재시도는 하지 않습니다. 재시도 여부는 호출자가 결정합니다.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from engagement.core.exceptions import ContentNotFoundError, StoreUnavailableError

logger = logging.getLogger(__name__)

# Firestore 배치 한 번에 담을 수 있는 최대 쓰기 수
MAX_BATCH_WRITES = 500


class FirestoreGateway:
    """엔진의 모든 서비스가 공유하는 Firestore 어댑터"""

    def __init__(self, client=None):
        """
        :param client: google.cloud.firestore.Client 호환 객체. 없으면 firebase_admin 기본 앱의 클라이언트를 사용합니다.
        """
        self.client = client if client is not None else firestore.client()

    # ------------------------------------------------------------------
    # 경로
    # ------------------------------------------------------------------
    def doc(self, *path: str):
        """('users', uid, 'followers', fid) 처럼 컬렉션/문서 이름을 번갈아 받아 DocumentReference 를 만듭니다."""
        if not path or len(path) % 2 != 0:
            raise ValueError(f"문서 경로는 짝수 개의 세그먼트여야 합니다: {path}")
        ref = self.client.collection(path[0]).document(path[1])
        for i in range(2, len(path), 2):
            ref = ref.collection(path[i]).document(path[i + 1])
        return ref

    def collection(self, *path: str):
        if not path or len(path) % 2 != 1:
            raise ValueError(f"컬렉션 경로는 홀수 개의 세그먼트여야 합니다: {path}")
        if len(path) == 1:
            return self.client.collection(path[0])
        return self.doc(*path[:-1]).collection(path[-1])

    def new_doc(self, *collection_path: str):
        """자동 생성 ID를 가진 새 문서 참조"""
        return self.collection(*collection_path).document()

    @staticmethod
    def increment(delta: int):
        """동시 적용에도 교환/결합 법칙이 성립하는 서버 측 증감 변환"""
        return firestore.Increment(delta)

    # ------------------------------------------------------------------
    # 읽기
    # ------------------------------------------------------------------
    def get(self, ref) -> Optional[Dict[str, Any]]:
        """문서를 읽어 dict 로 반환합니다. 없으면 None."""
        snapshot = self._call(ref.get, description=f"get {ref.path}")
        if not snapshot.exists:
            return None
        data = snapshot.to_dict() or {}
        data.setdefault('id', snapshot.id)
        return data

    def exists(self, ref) -> bool:
        snapshot = self._call(ref.get, description=f"exists {ref.path}")
        return bool(snapshot.exists)

    def stream(self, query) -> List[Dict[str, Any]]:
        """쿼리(또는 컬렉션) 결과를 id 가 포함된 dict 목록으로 반환합니다."""
        def _run():
            docs = []
            for snapshot in query.stream():
                data = snapshot.to_dict() or {}
                data.setdefault('id', snapshot.id)
                docs.append(data)
            return docs
        return self._call(_run, description="stream")

    # ------------------------------------------------------------------
    # 쓰기
    # ------------------------------------------------------------------
    def batch(self):
        return self.client.batch()

    def commit(self, batch) -> None:
        """배치를 커밋합니다. 전부 반영되거나 전혀 반영되지 않습니다."""
        self._call(batch.commit, description="batch commit")

    def set(self, ref, data: Dict[str, Any], merge: bool = False) -> None:
        self._call(lambda: ref.set(data, merge=merge), description=f"set {ref.path}")

    def update(self, ref, data: Dict[str, Any]) -> None:
        self._call(lambda: ref.update(data), description=f"update {ref.path}")

    def delete(self, ref) -> None:
        self._call(ref.delete, description=f"delete {ref.path}")

    def delete_many(self, refs: Iterable) -> int:
        """
        여러 문서를 500개 단위 배치로 나눠 삭제합니다. 정리 작업 전용이며 배치 간 원자성은 없습니다.
        :return: 삭제 요청한 문서 수
        """
        refs = list(refs)
        for start in range(0, len(refs), MAX_BATCH_WRITES):
            batch = self.batch()
            for ref in refs[start:start + MAX_BATCH_WRITES]:
                batch.delete(ref)
            self.commit(batch)
        return len(refs)

    # ------------------------------------------------------------------
    # 리스너
    # ------------------------------------------------------------------
    def listen(self, query, callback: Callable[[List[Dict[str, Any]]], None]) -> Callable[[], None]:
        """
        쿼리에 스냅샷 리스너를 등록합니다. 변경될 때마다 callback(docs) 가 호출됩니다.
        :return: 호출하면 구독을 해제하는 함수
        """
        def _on_snapshot(snapshots, changes, read_time):
            docs = []
            for snapshot in snapshots:
                data = snapshot.to_dict() or {}
                data.setdefault('id', snapshot.id)
                docs.append(data)
            try:
                callback(docs)
            except Exception as e:
                logger.error(f"스냅샷 콜백 처리 중 오류: {e}", exc_info=True)

        watch = self._call(lambda: query.on_snapshot(_on_snapshot), description="on_snapshot")
        return watch.unsubscribe

    # ------------------------------------------------------------------
    def _call(self, fn: Callable[[], Any], description: str = ''):
        try:
            return fn()
        except google_exceptions.NotFound as e:
            logger.warning(f"Firestore 문서 없음 ({description}): {e}")
            raise ContentNotFoundError(f"대상 문서를 찾을 수 없습니다: {description}") from e
        except (google_exceptions.GoogleAPICallError, google_exceptions.RetryError) as e:
            logger.error(f"Firestore 호출 실패 ({description}): {e}", exc_info=True)
            raise StoreUnavailableError(f"저장소를 사용할 수 없습니다: {description}") from e
