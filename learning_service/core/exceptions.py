"""
自定义异常类 - 用于系统错误处理
"""

from typing import Optional, Any


class LearningServiceError(Exception):
    """系统基础异常"""

    default_error_code = "SERVICE_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Any] = None):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(LearningServiceError):
    """资源不存在 (用户、套餐、交易、课程)"""
    default_error_code = "NOT_FOUND"


class InvalidStateError(LearningServiceError):
    """状态不允许当前操作 (重复待支付、交易非待确认、交易已过期)"""
    default_error_code = "INVALID_STATE"


class InternalError(LearningServiceError):
    """持久化过程中的意外错误"""
    default_error_code = "INTERNAL_ERROR"


class PermissionDeniedError(LearningServiceError):
    """权限相关异常"""
    default_error_code = "PERMISSION_DENIED"


class ValidationError(LearningServiceError):
    """数据验证异常"""
    default_error_code = "VALIDATION_ERROR"
