# engagement/client/api_client.py
"""
참여 API(좋아요/팔로우/댓글/알림)를 호출하는 HTTP 클라이언트.

2xx 가 아닌 응답과 네트워크 오류는 모두 EngagementApiError 로 올라오며,
OptimisticMutationController 는 이 예외를 받으면 로컬 상태를 되돌립니다.
"""
import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)


class EngagementApiError(Exception):
    """서버 호출 실패. 네트워크 오류면 status_code 가 None 입니다."""

    def __init__(self, message: str, status_code: Optional[int] = None, error_code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class EngagementApiClient:

    def __init__(self, base_url: str, token: str, session: Optional[requests.Session] = None, timeout: float = 10):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None,
                 params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        headers = {"Authorization": f"Bearer {self.token}"}
        try:
            response = self.session.request(method, url, json=json, params=params, headers=headers,
                                            timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"API 요청 실패 ({method} {path}): {e}")
            raise EngagementApiError(f"서버에 연결할 수 없습니다: {e}") from e

        if not 200 <= response.status_code < 300:
            try:
                body = response.json()
            except ValueError:
                body = {}
            error_code = body.get('error_code') if isinstance(body, dict) else None
            message = (body.get('message') if isinstance(body, dict) else None) or response.text
            logger.warning(f"API 오류 응답 ({method} {path}): {response.status_code} {error_code}")
            raise EngagementApiError(message or "요청이 실패했습니다.", status_code=response.status_code,
                                     error_code=error_code)

        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    # ------------------------------------------------------------------
    # 좋아요
    # ------------------------------------------------------------------
    def toggle_like(self, kind: str, content_id: str, parent_id: Optional[str] = None,
                    actor: Optional[Dict[str, str]] = None) -> bool:
        payload = {}
        if parent_id:
            payload['parent_id'] = parent_id
        if actor:
            payload['actor'] = actor
        return bool(self._request('POST', f"/api/likes/{kind}/{content_id}", json=payload)['is_liked'])

    def get_like_status(self, kind: str, content_id: str, parent_id: Optional[str] = None) -> Dict[str, Any]:
        params = {'parent_id': parent_id} if parent_id else None
        return self._request('GET', f"/api/likes/{kind}/{content_id}", params=params)

    # ------------------------------------------------------------------
    # 팔로우
    # ------------------------------------------------------------------
    def toggle_follow(self, target_user_id: str) -> bool:
        return bool(self._request('POST', f"/api/users/{target_user_id}/follow")['is_following'])

    def get_follow_status(self, target_user_id: str) -> bool:
        return bool(self._request('GET', f"/api/users/{target_user_id}/follow")['is_following'])

    # ------------------------------------------------------------------
    # 댓글
    # ------------------------------------------------------------------
    def add_comment(self, kind: str, content_id: str, text: str, parent_id: Optional[str] = None) -> str:
        payload = {'text': text}
        if parent_id:
            payload['parent_id'] = parent_id
        return self._request('POST', f"/api/comments/{kind}/{content_id}", json=payload)['comment_id']

    def delete_comment(self, kind: str, content_id: str, comment_id: str) -> None:
        self._request('DELETE', f"/api/comments/{kind}/{content_id}/{comment_id}")

    def get_thread(self, kind: str, content_id: str) -> Dict[str, Any]:
        return self._request('GET', f"/api/comments/{kind}/{content_id}")

    # ------------------------------------------------------------------
    # 알림
    # ------------------------------------------------------------------
    def get_notifications(self, limit: Optional[int] = None) -> Dict[str, Any]:
        params = {'limit': limit} if limit else None
        return self._request('GET', "/api/notifications", params=params)

    def mark_notification_read(self, notification_id: str) -> None:
        self._request('POST', f"/api/notifications/{notification_id}/read")

    def mark_all_notifications_read(self) -> int:
        return self._request('POST', "/api/notifications/read-all").get('updated', 0)
