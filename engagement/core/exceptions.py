# engagement/core/exceptions.py
"""
참여(좋아요/팔로우/댓글) 엔진에서 사용하는 예외 정의.

- 저장소 장애는 StoreUnavailableError 로 감싸서 호출자에게 그대로 전달합니다.
- '찾을 수 없음' 계열은 ValueError 를 함께 상속하여 기존 라우트의 ValueError -> 404 처리와 호환됩니다.
"""


class EngagementError(Exception):
    """엔진 예외의 공통 기반 클래스"""
    error_code = "ENGAGEMENT_ERROR"
    status_code = 500


class StoreUnavailableError(EngagementError):
    """Firestore 읽기/배치 커밋이 실패한 경우. 내부에서 재시도하지 않습니다."""
    error_code = "STORE_UNAVAILABLE"
    status_code = 503


class ContentNotFoundError(EngagementError, ValueError):
    error_code = "CONTENT_NOT_FOUND"
    status_code = 404


class UserNotFoundError(EngagementError, ValueError):
    error_code = "USER_NOT_FOUND"
    status_code = 404


class CommentNotFoundError(EngagementError, ValueError):
    error_code = "COMMENT_NOT_FOUND"
    status_code = 404


class UnknownContentKindError(EngagementError, ValueError):
    error_code = "UNKNOWN_CONTENT_KIND"
    status_code = 400


class InvalidParentError(EngagementError, ValueError):
    """답글의 parentId 가 없는 댓글이나 다른 답글을 가리키는 경우 (깊이는 1단계만 허용)."""
    error_code = "INVALID_PARENT"
    status_code = 400
