# engagement/api/notifications/schemas.py
from marshmallow import Schema, fields, validate

class NotificationResponseSchema(Schema):
    """알림 목록 응답 형식. Firestore 문서(camelCase)를 snake_case 로 내보냅니다."""
    notification_id = fields.Str(attribute='id')
    type = fields.Str(validate=validate.OneOf(['like', 'follow', 'comment', 'system']))
    actor_name = fields.Str(attribute='actorName')
    actor_avatar = fields.Str(attribute='actorAvatar')
    content = fields.Str()
    link = fields.Str(allow_none=True)
    read = fields.Bool(dump_default=False)
    created_at = fields.DateTime(attribute='createdAt')
