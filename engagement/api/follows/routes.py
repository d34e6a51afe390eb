# engagement/api/follows/routes.py
from flask import Blueprint, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity

from engagement.api.follows.schemas import FollowerResponseSchema, FollowingResponseSchema

follows_bp = Blueprint('follows_bp', __name__)

@follows_bp.route('/<string:target_id>/follow', methods=['POST'])
@jwt_required()
def toggle_follow(target_id: str):
    follow_service = current_app.services['follows']
    """
    대상 사용자를 팔로우하거나 언팔로우합니다.
    - 두 방향의 레코드와 두 카운터가 하나의 배치로 반영됩니다.
    """
    user_id = get_jwt_identity()
    is_following = follow_service.toggle_follow(target_id, user_id)
    return jsonify({"is_following": is_following}), 200


@follows_bp.route('/<string:target_id>/follow', methods=['GET'])
@jwt_required()
def get_follow_status(target_id: str):
    follow_service = current_app.services['follows']
    user_id = get_jwt_identity()
    return jsonify({"is_following": follow_service.get_follow_status(target_id, user_id)}), 200


@follows_bp.route('/<string:user_id>/followers', methods=['GET'])
@jwt_required(optional=True)
def get_followers(user_id: str):
    follow_service = current_app.services['follows']
    """특정 사용자의 팔로워 목록 (피드 표시용 이름/아바타 포함)"""
    followers = follow_service.get_followers(user_id)
    return jsonify({"followers": FollowerResponseSchema(many=True).dump(followers)}), 200


@follows_bp.route('/<string:user_id>/following', methods=['GET'])
@jwt_required(optional=True)
def get_following(user_id: str):
    follow_service = current_app.services['follows']
    following = follow_service.get_following(user_id)
    return jsonify({"following": FollowingResponseSchema(many=True).dump(following)}), 200
