"""
RBAC权限控制 - 普通用户/管理员角色与管理员细粒度权限
"""

from enum import Enum
from typing import Iterable, List

from learning_service.core.exceptions import PermissionDeniedError, ValidationError


class UserRole(str, Enum):
    """用户角色"""
    USER = "user"
    ADMIN = "admin"


class AdminPermission(str, Enum):
    """管理员权限"""
    # 视频管理
    UPLOAD_VIDEO = "upload_video"
    EDIT_VIDEO = "edit_video"
    DELETE_VIDEO = "delete_video"

    # 分类管理
    CREATE_CATEGORY = "create_category"
    EDIT_CATEGORY = "edit_category"
    DELETE_CATEGORY = "delete_category"

    # 用户管理
    VIEW_USERS = "view_users"
    EDIT_USERS = "edit_users"
    DELETE_USERS = "delete_users"

    # 数据分析
    VIEW_ANALYTICS = "view_analytics"

    # 系统设置
    MANAGE_SETTINGS = "manage_settings"


def parse_permissions(values: Iterable[str]) -> List[AdminPermission]:
    """将字符串列表转换为权限枚举，遇到未知权限时报错"""
    permissions = []
    for value in values or []:
        try:
            permissions.append(AdminPermission(value))
        except ValueError:
            raise ValidationError(f"未知的管理员权限: {value}", details={"permission": value})
    return permissions


def is_admin(user) -> bool:
    """是否为管理员"""
    return user is not None and user.role == UserRole.ADMIN.value


def has_permissions(user, *required: AdminPermission) -> bool:
    """
    检查管理员是否拥有全部所需权限

    非管理员一律返回False；未要求任何权限时只检查角色
    未知权限抛出 ValidationError
    """
    required_permissions = parse_permissions(required)
    if not is_admin(user):
        return False

    granted = user.permissions
    if not isinstance(granted, list):
        return not required_permissions

    granted_values = set(granted)
    return all(p.value in granted_values for p in required_permissions)


def require_permissions(user, *required: AdminPermission):
    """权限不足时抛出 PermissionDeniedError"""
    required_permissions = parse_permissions(required)
    if not has_permissions(user, *required_permissions):
        raise PermissionDeniedError(
            "权限不足",
            details={
                "user_id": getattr(user, "id", None),
                "required": [p.value for p in required_permissions],
            }
        )
    return user
