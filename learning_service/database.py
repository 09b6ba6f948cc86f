"""
Learning Service - 数据库连接管理

异步数据库引擎、会话工厂和事务支持
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy import text
from typing import AsyncGenerator, Dict, Any
from loguru import logger

from learning_service.config import settings


def _engine_options(database_url: str) -> Dict[str, Any]:
    """根据数据库类型生成引擎参数"""
    options: Dict[str, Any] = {
        "echo": settings.debug,  # 在调试模式下显示SQL
        "pool_pre_ping": True,   # 连接前检查
    }
    if database_url.startswith("sqlite"):
        options["connect_args"] = {
            "check_same_thread": False,  # SQLite多线程支持
            "timeout": 20,               # 连接超时20秒
        }
    else:
        options.update(
            pool_recycle=1800,
            pool_timeout=30,
            pool_size=10,
            max_overflow=20,
        )
    return options


# 创建异步引擎
engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# 创建会话工厂
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# 创建基础模型
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    获取数据库会话

    出错时回滚，无论成功与否都会关闭会话
    """
    session = AsyncSessionLocal()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_db():
    """初始化数据库 (创建所有表)"""
    try:
        # 导入所有模型以确保表被注册
        from learning_service.models import user, package, payment, content  # noqa: F401

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("数据库初始化成功: 用户、订阅套餐、支付交易、课程内容")
        return True

    except Exception as e:
        logger.error(f"数据库初始化失败: {e}")
        raise


async def close_db():
    """关闭数据库连接"""
    await engine.dispose()
    logger.info("数据库连接已关闭")


async def check_db_connection() -> bool:
    """检查数据库连接"""
    try:
        async with AsyncSessionLocal() as session:
            result = await session.execute(text("SELECT 1"))
            return result.scalar() == 1
    except Exception as e:
        logger.error(f"数据库连接检查失败: {e}")
        return False


# 事务支持
class DatabaseTransaction:
    """数据库事务管理器 - 正常退出自动提交，异常时回滚"""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or AsyncSessionLocal
        self.session = None
        self._committed = False

    async def __aenter__(self) -> AsyncSession:
        self.session = self.session_factory()
        return self.session

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None and not self._committed:
                await self.session.commit()
                self._committed = True
            elif exc_type is not None:
                await self.session.rollback()
        finally:
            await self.session.close()

    async def commit(self):
        """手动提交事务"""
        if self.session and not self._committed:
            await self.session.commit()
            self._committed = True

    async def rollback(self):
        """手动回滚事务"""
        if self.session:
            await self.session.rollback()
