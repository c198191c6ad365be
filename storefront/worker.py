import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.core.celery_app import celery_app
from storefront.db.session import AsyncSessionLocal, engine
from storefront.services.otp import delete_expired_otps

logger = logging.getLogger(__name__)

async def _sweep(session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal) -> int:
    async with session_factory() as session:
        return await delete_expired_otps(session)

async def _run_sweep() -> int:
    try:
        return await _sweep()
    finally:
        # Pooled connections are bound to this task's event loop
        await engine.dispose()

@celery_app.task(acks_late=True)
def sweep_expired_otps() -> int:
    logger.info("Sweeping expired OTP records")
    return asyncio.run(_run_sweep())
