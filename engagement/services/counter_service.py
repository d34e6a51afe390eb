# engagement/services/counter_service.py
"""
비정규화 카운터 유지기 (Counter Maintainer).

카운터 증감은 반드시 엣지 생성/삭제와 같은 배치 안에 들어가야 합니다.
별도 요청으로 보내면 둘 사이에 프로세스가 죽었을 때 값이 어긋납니다.
"""
from typing import Iterable

from engagement.services.firestore_service import FirestoreGateway


class CounterService:

    def __init__(self, gateway: FirestoreGateway):
        self.gateway = gateway

    def apply_delta(self, batch, doc_ref, fields: Iterable[str], delta: int) -> None:
        """
        배치에 카운터 증감을 추가합니다. 레거시 필드(likes)와 stats.* 필드를 함께 넘기면 한 번의 update 로 같이 갱신됩니다.

        :param batch: 엣지 변경이 담긴 WriteBatch
        :param doc_ref: 카운터가 있는 문서
        :param fields: 'likes', 'stats.likeCount' 같은 필드 경로 목록
        :param delta: +1 또는 -1
        """
        fields = tuple(fields)
        if not fields:
            raise ValueError("갱신할 카운터 필드가 없습니다.")
        if delta == 0:
            return
        batch.update(doc_ref, {field: self.gateway.increment(delta) for field in fields})

    @staticmethod
    def read(data: dict, field: str) -> int:
        """'stats.likeCount' 같은 점 표기 경로로 문서 dict 에서 카운터 값을 읽습니다. 없으면 0."""
        value = data
        for part in field.split('.'):
            if not isinstance(value, dict):
                return 0
            value = value.get(part)
        return int(value or 0)
