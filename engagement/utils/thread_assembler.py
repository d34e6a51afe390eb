# engagement/utils/thread_assembler.py
"""
평평한 댓글/답글 목록을 2단계 트리(루트 + 직계 답글)로 조립합니다.

- 루트: parentId 가 없는 항목, 최신순(내림차순)
- 답글: parentId 가 해당 루트의 id 인 항목, 오래된 순(오름차순)
- Q&A 스레드 표시 시 isBestAnswer 루트는 시간과 관계없이 맨 앞에 옵니다.

저장 순서와 무관하게 매 렌더링마다 전체 목록으로 다시 계산하는 순수 함수이며 상태를 갖지 않습니다.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from engagement.utils.datetime_utils import DateTimeUtils

CommentRecord = Dict[str, Any]


def _created_at(item: CommentRecord):
    return DateTimeUtils.sort_key(item.get('createdAt'))


@dataclass(frozen=True)
class CommentThread:
    """assemble_thread 의 결과. roots 와 replies_of(id) 로 트리를 읽습니다."""
    roots: List[CommentRecord]
    replies: Dict[str, List[CommentRecord]] = field(default_factory=dict)
    orphans: List[CommentRecord] = field(default_factory=list)  # 부모 루트가 사라진 답글

    def replies_of(self, comment_id: str) -> List[CommentRecord]:
        return list(self.replies.get(comment_id, []))

    def to_dict(self) -> Dict[str, Any]:
        """API 응답용: 각 루트에 replies 배열을 붙인 형태"""
        return {
            "roots": [dict(root, replies=self.replies_of(root.get('id'))) for root in self.roots],
            "orphans": list(self.orphans),
        }


def assemble_thread(flat_comments: Iterable[CommentRecord], pin_best_answer: bool = False) -> CommentThread:
    """
    평평한 댓글 목록을 CommentThread 로 조립합니다.

    :param flat_comments: id, createdAt, (선택) parentId, isBestAnswer 를 가진 댓글 딕셔너리 목록
    :param pin_best_answer: 해결된 Q&A 스레드처럼 isBestAnswer 항목을 루트 맨 앞에 고정할지 여부
    """
    items = list(flat_comments)

    roots = [item for item in items if not item.get('parentId')]
    # sorted 는 안정 정렬이므로 같은 시각의 항목은 입력 순서를 유지합니다.
    roots = sorted(roots, key=_created_at, reverse=True)
    if pin_best_answer:
        roots = sorted(roots, key=lambda item: not item.get('isBestAnswer', False))

    root_ids = {root.get('id') for root in roots}
    replies: Dict[str, List[CommentRecord]] = {}
    orphans: List[CommentRecord] = []
    for item in items:
        parent_id: Optional[str] = item.get('parentId')
        if not parent_id:
            continue
        if parent_id in root_ids:
            replies.setdefault(parent_id, []).append(item)
        else:
            orphans.append(item)

    for parent_id in replies:
        replies[parent_id].sort(key=_created_at)
    orphans.sort(key=_created_at)

    return CommentThread(roots=roots, replies=replies, orphans=orphans)
