# engagement/api/likes/schemas.py
from marshmallow import Schema, fields

class ActorSchema(Schema):
    """알림에 표시할 행위자 정보 (클라이언트가 이미 알고 있는 경우 전달)"""
    name = fields.Str(required=True)
    avatar = fields.Str(load_default='')

class LikeToggleSchema(Schema):
    """POST /api/likes/{kind}/{content_id} 요청 본문. 본문 전체가 생략될 수 있습니다."""
    parent_id = fields.Str(load_default=None, allow_none=True)
    actor = fields.Nested(ActorSchema, load_default=None, allow_none=True)

class LikeStatusResponseSchema(Schema):
    is_liked = fields.Bool(required=True)
    like_count = fields.Int(dump_default=None, allow_none=True)
