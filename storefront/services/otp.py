"""
OTP ledger.

Issues, verifies, re-issues and expires single-use six digit codes scoped by
(phone, purpose). At most one record exists per pair: issuing upserts on the
(phone, purpose) key, so a newer code always replaces the older one.
"""

import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from storefront.core.security import hash_otp, otp_matches
from storefront.models.otp import Otp
from storefront.services.errors import DeliveryFailed, InvalidOtp, OtpExpired, OtpNotFound
from storefront.services.sms import SmsSender, format_otp_message
from storefront.utils.dates import utc_now

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@dataclass
class IssuedOtp:
    code: str
    expires_at: datetime

def generate_otp() -> str:
    return f"{secrets.randbelow(1_000_000):06d}"

async def delete_expired_otps(session: AsyncSession) -> int:
    """
    Delete every record past its expiry, used or not. Returns the count.
    """
    result = await session.execute(delete(Otp).where(Otp.expires_at < utc_now()))
    await session.commit()
    deleted = result.rowcount or 0
    logger.info(f"Swept {deleted} expired OTP records")
    return deleted

def _insert_for(session: AsyncSession):
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise RuntimeError(f"OTP upsert is not supported on {dialect}")

class OTPLedger:
    def __init__(self, session: AsyncSession, sms: SmsSender, secret_key: str, ttl_minutes: int = 10):
        self.session = session
        self.sms = sms
        self._secret_key = secret_key
        self.ttl_minutes = ttl_minutes

    async def issue(self, phone: str, purpose: str) -> IssuedOtp:
        """
        Store a fresh code for (phone, purpose) and send it by SMS.

        The record is committed before delivery and is kept when the gateway
        fails, so the caller can fall back to resend.
        """
        code = generate_otp()
        now = utc_now()
        expires_at = now + timedelta(minutes=self.ttl_minutes)
        values = {
            "code_hash": hash_otp(code, self._secret_key),
            "expires_at": expires_at,
            "is_used": False,
            "created_at": now,
        }

        insert = _insert_for(self.session)
        stmt = insert(Otp).values(id=uuid.uuid4(), phone=phone, purpose=str(purpose), **values)
        stmt = stmt.on_conflict_do_update(index_elements=["phone", "purpose"], set_=values)
        await self.session.execute(stmt)
        await self.session.commit()
        logger.info(f"OTP issued for {phone} ({purpose}), expires at {expires_at.isoformat()}")

        result = await self.sms.send_sms(phone, format_otp_message(code, purpose, self.ttl_minutes))
        if not result.success:
            logger.warning(f"OTP delivery to {phone} failed: {result.message}")
            raise DeliveryFailed("Failed to send OTP. Please try resending.")

        return IssuedOtp(code=code, expires_at=expires_at)

    async def resend(self, phone: str, purpose: str) -> IssuedOtp:
        return await self.issue(phone, purpose)

    async def verify(self, phone: str, purpose: str, candidate: str) -> None:
        """
        Consume the outstanding code for (phone, purpose).

        A mismatch leaves the record usable until it expires; an expired
        record is marked used so it cannot be retried.
        """
        query = select(Otp).where(
            Otp.phone == phone,
            Otp.purpose == str(purpose),
            Otp.is_used == False,  # noqa: E712
        ).order_by(Otp.created_at.desc()).execution_options(populate_existing=True)
        result = await self.session.execute(query)
        record = result.scalars().first()

        if not record:
            raise OtpNotFound("OTP not found or already used")

        if utc_now() > record.expires_at:
            record.is_used = True
            self.session.add(record)
            await self.session.commit()
            logger.info(f"Expired OTP presented for {phone} ({purpose})")
            raise OtpExpired("OTP expired. Please request a new one.")

        if not otp_matches(candidate, record.code_hash, self._secret_key):
            logger.info(f"Invalid OTP presented for {phone} ({purpose})")
            raise InvalidOtp("Invalid OTP")

        record.is_used = True
        self.session.add(record)
        await self.session.commit()
        logger.info(f"OTP verified for {phone} ({purpose})")

    async def sweep_expired(self) -> int:
        return await delete_expired_otps(self.session)
