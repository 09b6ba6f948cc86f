"""
课程内容访问控制
会员课程/课时仅对有效会员和管理员开放
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from loguru import logger

from learning_service.core.exceptions import NotFoundError, PermissionDeniedError
from learning_service.core.rbac import is_admin
from learning_service.models.content import Course, Lesson
from learning_service.models.user import User
from learning_service.services.premium_service import premium_service


class ContentAccessService:
    """课程内容访问控制服务"""

    def _check_premium_access(self, user: User, requires_premium: bool, now: Optional[datetime]) -> bool:
        if not requires_premium:
            return True
        if is_admin(user):
            return True
        return premium_service.has_active_premium(user, now)

    async def _get_active_course(self, db: AsyncSession, course_id: int) -> Course:
        result = await db.execute(
            select(Course).where(Course.id == course_id, Course.is_active.is_(True))
        )
        course = result.scalar_one_or_none()
        if not course:
            raise NotFoundError("课程不存在", details={"course_id": course_id})
        return course

    async def _get_active_lesson(self, db: AsyncSession, lesson_id: int) -> Lesson:
        result = await db.execute(
            select(Lesson)
            .options(selectinload(Lesson.course))
            .where(Lesson.id == lesson_id, Lesson.is_active.is_(True))
        )
        lesson = result.scalar_one_or_none()
        if not lesson or not lesson.course or not lesson.course.is_active:
            raise NotFoundError("课时不存在", details={"lesson_id": lesson_id})
        return lesson

    async def can_access_course(
        self,
        db: AsyncSession,
        user: Optional[User],
        course_id: int,
        now: Optional[datetime] = None
    ) -> bool:
        """用户是否可以访问课程"""
        course = await self._get_active_course(db, course_id)
        return self._check_premium_access(user, course.is_premium, now)

    async def can_access_lesson(
        self,
        db: AsyncSession,
        user: Optional[User],
        lesson_id: int,
        now: Optional[datetime] = None
    ) -> bool:
        """用户是否可以访问课时 (课时或所属课程任一为会员内容即需要会员)"""
        lesson = await self._get_active_lesson(db, lesson_id)
        return self._lesson_accessible(user, lesson, now)

    def _lesson_accessible(self, user: Optional[User], lesson: Lesson, now: Optional[datetime]) -> bool:
        requires_premium = bool(lesson.is_premium or lesson.course.is_premium)
        return self._check_premium_access(user, requires_premium, now)

    async def ensure_lesson_access(
        self,
        db: AsyncSession,
        user: Optional[User],
        lesson_id: int,
        now: Optional[datetime] = None
    ) -> Lesson:
        """校验课时访问权限，无权限时抛出 PermissionDeniedError"""
        lesson = await self._get_active_lesson(db, lesson_id)
        if not self._lesson_accessible(user, lesson, now):
            logger.info(f"会员内容访问被拒绝: 用户 {getattr(user, 'id', None)}, 课时 {lesson_id}")
            raise PermissionDeniedError(
                "该课时需要会员权限",
                details={"lesson_id": lesson_id}
            )
        return lesson


content_access_service = ContentAccessService()
