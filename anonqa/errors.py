from fastapi import HTTPException, status


class QAError(HTTPException):
    """服務層錯誤的基底類別，帶有穩定的 reason 代碼供前端判斷"""

    status_code = status.HTTP_400_BAD_REQUEST
    reason = "error"
    default_detail = "請求失敗"

    def __init__(self, detail: str = None, reason: str = None, headers: dict = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )
        if reason:
            self.reason = reason


class Unauthenticated(QAError):
    status_code = status.HTTP_401_UNAUTHORIZED
    reason = "unauthenticated"
    default_detail = "無效的認證憑證"

    def __init__(self, detail: str = None, reason: str = None):
        super().__init__(detail, reason, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(QAError):
    status_code = status.HTTP_403_FORBIDDEN
    reason = "forbidden"
    default_detail = "權限不足"


class NotFound(QAError):
    status_code = status.HTTP_404_NOT_FOUND
    reason = "not_found"
    default_detail = "資料不存在"


class ValidationFailed(QAError):
    status_code = 422
    reason = "validation_failed"
    default_detail = "資料格式錯誤"


class ConflictFailed(QAError):
    status_code = status.HTTP_409_CONFLICT
    reason = "conflict"
    default_detail = "資料已存在"


class DependencyFailed(QAError):
    status_code = status.HTTP_502_BAD_GATEWAY
    reason = "dependency_failed"
    default_detail = "外部服務暫時無法使用"
