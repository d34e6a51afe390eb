# engagement/api/likes/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from engagement.api.likes.schemas import LikeToggleSchema, LikeStatusResponseSchema

likes_bp = Blueprint('likes_bp', __name__)

@likes_bp.route('/<string:kind>/<string:content_id>', methods=['POST'])
@jwt_required()
def toggle_like(kind: str, content_id: str):
    like_service = current_app.services['likes']
    """
    콘텐츠의 좋아요를 누르거나 취소합니다.
    - 응답의 is_liked 는 처리 후의 새 상태입니다.
    - 좋아요 알림은 응답 이후 분리 실행되며, 실패해도 이 요청은 성공합니다.
    """
    user_id = get_jwt_identity()
    try:
        data = LikeToggleSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    is_liked = like_service.toggle_like(kind, content_id, user_id, actor=data['actor'], parent_id=data['parent_id'])
    return jsonify(LikeStatusResponseSchema().dump({"is_liked": is_liked})), 200


@likes_bp.route('/<string:kind>/<string:content_id>', methods=['GET'])
@jwt_required()
def get_like_status(kind: str, content_id: str):
    like_service = current_app.services['likes']
    """현재 사용자의 좋아요 여부와 비정규화된 좋아요 수를 조회합니다."""
    user_id = get_jwt_identity()
    parent_id = request.args.get('parent_id', None, type=str)
    is_liked = like_service.get_like_status(kind, content_id, user_id, parent_id=parent_id)
    like_count = like_service.get_like_count(kind, content_id, parent_id=parent_id)
    logging.debug(f"좋아요 상태 조회: {kind}:{content_id} user={user_id} -> {is_liked}")
    return jsonify(LikeStatusResponseSchema().dump({"is_liked": is_liked, "like_count": like_count})), 200
