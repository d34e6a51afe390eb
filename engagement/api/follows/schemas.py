# engagement/api/follows/schemas.py
from marshmallow import Schema, fields

class FollowerResponseSchema(Schema):
    """users/{id}/followers 레코드 응답 형식"""
    user_id = fields.Str(attribute='followerId')
    name = fields.Str(attribute='followerName')
    username = fields.Str(attribute='followerUsername', allow_none=True)
    avatar = fields.Str(attribute='followerAvatar')
    since = fields.DateTime()

class FollowingResponseSchema(Schema):
    """users/{id}/following 레코드 응답 형식"""
    user_id = fields.Str(attribute='followingId')
    since = fields.DateTime()
