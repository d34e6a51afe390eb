# engagement/api/comments/schemas.py
from marshmallow import Schema, fields, validate

class CommentCreateSchema(Schema):
    """
    POST /api/comments/{kind}/{content_id}
    댓글(답글) 작성을 요청할 때의 데이터 형식을 정의하고 유효성을 검사합니다.
    작성자 표시 정보를 생략하면 프로필에서 채웁니다.
    """
    text = fields.Str(required=True, validate=validate.Length(min=1, max=1000, error="댓글은 1~1000자 사이여야 합니다."))
    parent_id = fields.Str(load_default=None, allow_none=True)
    author_name = fields.Str(load_default=None, allow_none=True)
    author_avatar = fields.Str(load_default=None, allow_none=True)
    author_username = fields.Str(load_default=None, allow_none=True)

class BestAnswerSchema(Schema):
    """POST .../best-answer 요청 본문. mark=false 면 채택을 취소합니다."""
    mark = fields.Bool(load_default=True)

class CommentResponseSchema(Schema):
    """
    댓글 정보 응답을 위한 최종 JSON 형식을 정의합니다.
    Firestore 문서(camelCase)를 그대로 받아 snake_case 로 내보냅니다.
    """
    comment_id = fields.Str(attribute='id', required=True)
    author_id = fields.Str(attribute='authorId', required=True)
    author_name = fields.Str(attribute='authorName')
    author_avatar = fields.Str(attribute='authorAvatar')
    author_username = fields.Str(attribute='authorUsername', allow_none=True)
    text = fields.Str(required=True)
    like_count = fields.Int(attribute='likes', dump_default=0)
    parent_id = fields.Str(attribute='parentId', allow_none=True)
    is_best_answer = fields.Bool(attribute='isBestAnswer', dump_default=False)
    created_at = fields.DateTime(attribute='createdAt')

class ThreadRootResponseSchema(CommentResponseSchema):
    """루트 댓글 + 오래된 순으로 정렬된 답글"""
    replies = fields.List(fields.Nested(CommentResponseSchema), dump_default=list)

class CommentThreadResponseSchema(Schema):
    """GET /api/comments/{kind}/{content_id} 응답: 루트 댓글(답글 포함)과 부모 없는 답글"""
    roots = fields.List(fields.Nested(ThreadRootResponseSchema))
    orphans = fields.List(fields.Nested(CommentResponseSchema))
