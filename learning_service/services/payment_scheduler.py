"""
支付定时调度器 - 定期清理过期交易和到期会员
"""

from typing import Any, Dict, Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from learning_service.config import settings
from learning_service.database import AsyncSessionLocal
from learning_service.services.payment_service import payment_service


class PaymentScheduler:
    """支付定时调度器"""

    def __init__(self, timezone: Optional[str] = None):
        self.timezone = timezone or settings.scheduler_timezone
        self.scheduler = AsyncIOScheduler(timezone=self.timezone)
        self.is_running = False

    async def start(self):
        """启动调度器"""
        if self.is_running:
            logger.warning("支付定时调度器已在运行")
            return

        self._setup_scheduled_jobs()

        self.scheduler.start()
        self.is_running = True

        logger.info("支付定时调度器已启动")

    async def stop(self):
        """停止调度器"""
        if not self.is_running:
            return

        self.scheduler.shutdown(wait=False)
        self.is_running = False

        logger.info("支付定时调度器已停止")

    def _setup_scheduled_jobs(self):
        """设置定时任务"""

        # 每小时检查到期会员
        self.scheduler.add_job(
            self.handle_premium_expiry,
            trigger=CronTrigger.from_crontab(settings.premium_expiry_cron, timezone=self.timezone),
            id='premium_expiry',
            name='会员到期检查',
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )

        # 每6小时清理过期支付交易
        self.scheduler.add_job(
            self.handle_payment_cleanup,
            trigger=CronTrigger.from_crontab(settings.payment_cleanup_cron, timezone=self.timezone),
            id='payment_cleanup',
            name='过期交易清理',
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )

        # 每天凌晨2点执行全量清理
        self.scheduler.add_job(
            self.handle_daily_cleanup,
            trigger=CronTrigger.from_crontab(settings.daily_cleanup_cron, timezone=self.timezone),
            id='daily_cleanup',
            name='每日清理',
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )

        logger.info("定时任务设置完成")

    async def handle_premium_expiry(self) -> Optional[int]:
        """会员到期检查"""
        logger.info("开始执行会员到期检查")
        try:
            async with AsyncSessionLocal() as session:
                return await payment_service.expire_premium_users(session)
        except Exception as e:
            logger.error(f"会员到期检查失败: {e}")
            return None

    async def handle_payment_cleanup(self) -> Optional[int]:
        """过期交易清理"""
        logger.info("开始执行过期交易清理")
        try:
            async with AsyncSessionLocal() as session:
                return await payment_service.expire_old_transactions(session)
        except Exception as e:
            logger.error(f"过期交易清理失败: {e}")
            return None

    async def handle_daily_cleanup(self) -> Optional[Dict[str, int]]:
        """每日清理: 到期会员 + 过期交易"""
        logger.info("开始执行每日清理任务")
        try:
            async with AsyncSessionLocal() as session:
                expired_users = await payment_service.expire_premium_users(session)
                expired_transactions = await payment_service.expire_old_transactions(session)
        except Exception as e:
            logger.error(f"每日清理任务失败: {e}")
            return None

        logger.info(f"每日清理完成: 会员 {expired_users} 个, 交易 {expired_transactions} 个")
        return {
            "expired_users": expired_users,
            "expired_transactions": expired_transactions,
        }

    def get_status(self) -> Dict[str, Any]:
        """获取调度器状态"""
        jobs = []
        for job in self.scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run_time": next_run.isoformat() if next_run else None,
            })
        return {
            "running": self.is_running,
            "timezone": str(self.timezone),
            "jobs": jobs,
        }


# 全局实例
payment_scheduler = PaymentScheduler()
