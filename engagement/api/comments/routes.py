# engagement/api/comments/routes.py
import logging
from flask import Blueprint, request, jsonify, Response, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from engagement.api.comments.schemas import BestAnswerSchema, CommentCreateSchema, CommentThreadResponseSchema
from engagement.models.user import DEFAULT_USER_NAME
from engagement.services.account_directory import AuthorCache


comments_bp = Blueprint('comments_bp', __name__)

@comments_bp.route('/<string:kind>/<string:content_id>', methods=['POST'])
@jwt_required()
def create_comment(kind: str, content_id: str):
    comment_service = current_app.services['comments']
    accounts = current_app.services['accounts']
    """
    콘텐츠에 새 댓글(parent_id 가 있으면 답글)을 작성합니다.
    - 성공 시, 생성된 댓글 ID를 201 Created 상태 코드와 함께 반환합니다.
    - 작성 후 콘텐츠 작성자(답글이면 원 댓글 작성자)에게 알림이 생성됩니다.
    """
    user_id = get_jwt_identity()
    try:
        data = CommentCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    # 요청에 작성자 표시 정보가 없으면 프로필에서 스냅샷을 만듭니다.
    profile = accounts.get_profile(user_id)
    comment_id = comment_service.add_comment(kind, content_id, {
        'author_id': user_id,
        'author_name': data['author_name'] or (profile.name if profile else DEFAULT_USER_NAME),
        'author_avatar': data['author_avatar'] or (profile.avatar if profile else ''),
        'author_username': data['author_username'] or (profile.username if profile else None),
        'text': data['text'],
        'parent_id': data['parent_id'],
    })
    return jsonify({"comment_id": comment_id}), 201

@comments_bp.route('/<string:kind>/<string:content_id>', methods=['GET'])
@jwt_required(optional=True)
def get_comment_thread(kind: str, content_id: str):
    comment_service = current_app.services['comments']
    """
    댓글 트리를 조회합니다. 루트 댓글은 최신순, 답글은 오래된 순입니다.
    """
    cache = AuthorCache(current_app.config.get('AUTHOR_CACHE_SIZE', 256))
    thread = comment_service.get_thread(kind, content_id, author_cache=cache)
    logging.debug(f"댓글 트리 조회 ({kind}:{content_id}): 루트 {len(thread.roots)}개, 고아 {len(thread.orphans)}개")
    return jsonify(CommentThreadResponseSchema().dump(thread.to_dict())), 200


@comments_bp.route('/<string:kind>/<string:content_id>/<string:comment_id>', methods=['DELETE'])
@jwt_required()
def delete_comment(kind: str, content_id: str, comment_id: str):
    comment_service = current_app.services['comments']
    """
    댓글을 삭제합니다. (댓글 작성자 또는 콘텐츠 작성자만 가능)
    - 성공 시, 콘텐츠의 댓글 수가 1 감소합니다. 답글은 남습니다.
    """
    user_id = get_jwt_identity()
    try:
        comment_service.delete_comment(kind, content_id, comment_id, requester_id=user_id)
        return Response(status=204)
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403


@comments_bp.route('/forum_thread/<string:thread_id>/<string:reply_id>/best-answer', methods=['POST'])
@jwt_required()
def mark_best_answer(thread_id: str, reply_id: str):
    comment_service = current_app.services['comments']
    """스레드 작성자가 답변을 채택하거나 채택을 취소합니다."""
    user_id = get_jwt_identity()
    try:
        data = BestAnswerSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    try:
        comment_service.mark_best_answer(thread_id, reply_id, mark=data['mark'], requester_id=user_id)
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    return jsonify({"reply_id": reply_id, "is_best_answer": data['mark']}), 200
