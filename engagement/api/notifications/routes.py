# engagement/api/notifications/routes.py
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity

from engagement.api.notifications.schemas import NotificationResponseSchema

notifications_bp = Blueprint('notifications_bp', __name__)

@notifications_bp.route('', methods=['GET'])
@jwt_required()
def get_my_notifications():
    notification_service = current_app.services['notifications']
    """내 알림을 최신순으로 조회하고, 읽지 않은 알림 수를 함께 반환합니다."""
    user_id = get_jwt_identity()
    limit = request.args.get('limit', current_app.config.get('NOTIFICATION_PAGE_SIZE', 20), type=int)
    notifications = notification_service.list_notifications(user_id, limit=limit)
    return jsonify({
        "notifications": NotificationResponseSchema(many=True).dump(notifications),
        "unread_count": notification_service.unread_count(user_id),
    }), 200


@notifications_bp.route('/<string:notification_id>/read', methods=['POST'])
@jwt_required()
def mark_notification_read(notification_id: str):
    notification_service = current_app.services['notifications']
    user_id = get_jwt_identity()
    notification_service.mark_read(user_id, notification_id)
    return jsonify({"message": "알림을 읽음 처리했습니다."}), 200


@notifications_bp.route('/read-all', methods=['POST'])
@jwt_required()
def mark_all_notifications_read():
    notification_service = current_app.services['notifications']
    user_id = get_jwt_identity()
    updated = notification_service.mark_all_read(user_id)
    return jsonify({"updated": updated}), 200
