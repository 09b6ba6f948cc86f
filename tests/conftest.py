"""
测试配置和共享fixtures
为所有测试提供临时数据库、会话工厂和基础数据
"""

import pytest
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from learning_service.database import Base
from learning_service.core.rbac import UserRole, AdminPermission
from learning_service.models import User, Package, Category, Course, Lesson  # noqa: F401
from learning_service.services.package_service import package_service


@pytest.fixture
async def test_engine(tmp_path):
    """创建测试数据库引擎 (每个测试独立的临时SQLite文件)"""
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    engine = create_async_engine(database_url, echo=False)

    # 创建所有表
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def test_session_factory(test_engine):
    """测试会话工厂"""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


@pytest.fixture
async def test_db_session(test_session_factory) -> AsyncGenerator[AsyncSession, None]:
    """创建测试数据库会话"""
    async with test_session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


@pytest.fixture
async def packages(test_db_session: AsyncSession):
    """写入默认套餐，按类型返回"""
    await package_service.seed_default_packages(test_db_session)
    items = await package_service.list_active_packages(test_db_session)
    return {p.type: p for p in items}


@pytest.fixture
async def test_user(test_db_session: AsyncSession) -> User:
    """普通用户 (非会员)"""
    user = User(
        full_name="Test Student",
        email="student@example.com",
        password_hash="hashed_password",
        role=UserRole.USER.value,
    )
    test_db_session.add(user)
    await test_db_session.commit()
    return user


@pytest.fixture
async def admin_user(test_db_session: AsyncSession) -> User:
    """拥有全部权限的管理员"""
    admin = User(
        full_name="Test Admin",
        email="admin@example.com",
        password_hash="hashed_password",
        role=UserRole.ADMIN.value,
        permissions=[p.value for p in AdminPermission],
    )
    test_db_session.add(admin)
    await test_db_session.commit()
    return admin


@pytest.fixture
async def sample_content(test_db_session: AsyncSession):
    """示例课程内容: 免费课程和会员课程各一门"""
    category = Category(name="Programming", description="Programming courses")
    test_db_session.add(category)
    await test_db_session.flush()

    free_course = Course(
        title="Python Basics",
        description="Free introduction",
        category_id=category.id,
        is_premium=False,
    )
    premium_course = Course(
        title="Advanced Python",
        description="Premium deep dive",
        category_id=category.id,
        is_premium=True,
    )
    test_db_session.add_all([free_course, premium_course])
    await test_db_session.flush()

    free_lesson = Lesson(course_id=free_course.id, title="Hello World", lesson_order=1, is_premium=False)
    premium_lesson = Lesson(course_id=free_course.id, title="Bonus Lesson", lesson_order=2, is_premium=True)
    locked_lesson = Lesson(course_id=premium_course.id, title="Metaclasses", lesson_order=1, is_premium=False)
    inactive_lesson = Lesson(
        course_id=free_course.id, title="Draft", lesson_order=3, is_premium=False, is_active=False
    )
    test_db_session.add_all([free_lesson, premium_lesson, locked_lesson, inactive_lesson])
    await test_db_session.commit()

    return {
        "free_course": free_course,
        "premium_course": premium_course,
        "free_lesson": free_lesson,
        "premium_lesson": premium_lesson,
        "locked_lesson": locked_lesson,
        "inactive_lesson": inactive_lesson,
    }
