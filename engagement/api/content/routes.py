# engagement/api/content/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity

content_bp = Blueprint('content_bp', __name__)

@content_bp.route('/<string:kind>/<string:content_id>/announce', methods=['POST'])
@jwt_required()
def announce_publication(kind: str, content_id: str):
    content_service = current_app.services['content']
    """
    새로 게시한 콘텐츠를 작성자의 팔로워에게 알립니다. (콘텐츠 작성자만 가능)
    - ?detached=true 이면 팬아웃을 분리 실행하고 202 Accepted 를 반환합니다.
    """
    user_id = get_jwt_identity()
    detached = request.args.get('detached', 'false').lower() == 'true'
    try:
        sent = content_service.announce_publication(kind, content_id, requester_id=user_id, detached=detached)
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    if detached:
        return jsonify({"message": "게시 알림 전송을 시작했습니다."}), 202
    return jsonify({"notified": sent}), 200


@content_bp.route('/<string:kind>/<string:content_id>', methods=['DELETE'])
@jwt_required()
def delete_content(kind: str, content_id: str):
    content_service = current_app.services['content']
    """
    콘텐츠를 삭제하고 좋아요/알림/댓글을 정리합니다. (작성자 본인만 가능)
    - 정리 단계의 실패는 응답에 영향을 주지 않습니다.
    """
    user_id = get_jwt_identity()
    parent_id = request.args.get('parent_id', None, type=str)
    try:
        summary = content_service.delete_content(kind, content_id, requester_id=user_id, parent_id=parent_id)
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    logging.info(f"콘텐츠 삭제 요청 처리 완료 ({kind}:{content_id}) by {user_id}")
    return jsonify({"deleted": summary}), 200
