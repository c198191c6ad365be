import asyncio
import pytest
from datetime import timedelta
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlmodel import SQLModel, select

from storefront import worker
from storefront.core.config import settings
from storefront.core.security import hash_otp
from storefront.models.otp import Otp
from storefront.services import otp as otp_module
from storefront.services.otp import OTPLedger
from storefront.services.errors import DeliveryFailed, InvalidOtp, OtpExpired, OtpNotFound
from storefront.utils.dates import utc_now
from tests.utils import FakeSmsSender, other_code

async def unconsumed(session, phone, purpose):
    result = await session.execute(
        select(Otp).where(Otp.phone == phone, Otp.purpose == purpose, Otp.is_used == False)  # noqa: E712
    )
    return result.scalars().all()

async def expire(session, phone, purpose):
    result = await session.execute(select(Otp).where(Otp.phone == phone, Otp.purpose == purpose))
    record = result.scalars().one()
    record.expires_at = utc_now() - timedelta(minutes=1)
    session.add(record)
    await session.commit()
    return record

def test_generate_otp_keeps_leading_zeros(monkeypatch):
    monkeypatch.setattr(otp_module.secrets, "randbelow", lambda n: 42)
    assert otp_module.generate_otp() == "000042"

def test_generate_otp_is_six_digits():
    for _ in range(50):
        code = otp_module.generate_otp()
        assert len(code) == 6 and code.isdigit()

@pytest.mark.asyncio
async def test_issue_sends_code_and_stores_only_hash(ledger, session, sms):
    issued = await ledger.issue("9000000001", "register")

    assert sms.last_code("9000000001") == issued.code
    assert "registration" in sms.messages[-1][1]
    records = await unconsumed(session, "9000000001", "register")
    assert len(records) == 1
    assert records[0].code_hash != issued.code
    assert records[0].expires_at == issued.expires_at

@pytest.mark.asyncio
async def test_issue_twice_leaves_one_unconsumed_record(ledger, session):
    await ledger.issue("9000000001", "login")
    await ledger.issue("9000000001", "login")
    await ledger.issue("9000000001", "register")

    assert len(await unconsumed(session, "9000000001", "login")) == 1
    assert len(await unconsumed(session, "9000000001", "register")) == 1

@pytest.mark.asyncio
async def test_verify_correct_code_succeeds_once(ledger):
    issued = await ledger.issue("9000000001", "login")

    await ledger.verify("9000000001", "login", issued.code)

    with pytest.raises(OtpNotFound):
        await ledger.verify("9000000001", "login", issued.code)

@pytest.mark.asyncio
async def test_verify_wrong_code_allows_retry(ledger, session):
    issued = await ledger.issue("9000000001", "login")

    with pytest.raises(InvalidOtp):
        await ledger.verify("9000000001", "login", other_code(issued.code))

    assert len(await unconsumed(session, "9000000001", "login")) == 1
    await ledger.verify("9000000001", "login", issued.code)

@pytest.mark.asyncio
async def test_verify_is_scoped_by_purpose(ledger):
    issued = await ledger.issue("9000000001", "register")

    with pytest.raises(OtpNotFound):
        await ledger.verify("9000000001", "login", issued.code)

@pytest.mark.asyncio
async def test_verify_after_expiry_fails_even_with_correct_code(ledger, session):
    issued = await ledger.issue("9000000001", "login")
    record = await expire(session, "9000000001", "login")

    with pytest.raises(OtpExpired):
        await ledger.verify("9000000001", "login", issued.code)

    await session.refresh(record)
    assert record.is_used is True
    with pytest.raises(OtpNotFound):
        await ledger.verify("9000000001", "login", issued.code)

@pytest.mark.asyncio
async def test_verify_without_issue_is_not_found(ledger):
    with pytest.raises(OtpNotFound):
        await ledger.verify("9000000001", "login", "123456")

@pytest.mark.asyncio
async def test_resend_invalidates_previous_code(ledger, monkeypatch):
    codes = iter(["111111", "222222"])
    monkeypatch.setattr(otp_module, "generate_otp", lambda: next(codes))

    first = await ledger.issue("9000000001", "login")
    second = await ledger.resend("9000000001", "login")

    with pytest.raises(InvalidOtp):
        await ledger.verify("9000000001", "login", first.code)
    await ledger.verify("9000000001", "login", second.code)

@pytest.mark.asyncio
async def test_resend_after_consumption_issues_usable_code(ledger):
    first = await ledger.issue("9000000001", "login")
    await ledger.verify("9000000001", "login", first.code)

    second = await ledger.resend("9000000001", "login")
    await ledger.verify("9000000001", "login", second.code)

@pytest.mark.asyncio
async def test_delivery_failure_keeps_record(ledger, session, sms):
    sms.fail = True

    with pytest.raises(DeliveryFailed):
        await ledger.issue("9000000001", "register")

    assert len(await unconsumed(session, "9000000001", "register")) == 1

@pytest.mark.asyncio
async def test_sweep_deletes_only_expired_records(ledger, session):
    await ledger.issue("9000000001", "login")
    await ledger.issue("9000000002", "login")
    await expire(session, "9000000001", "login")

    deleted = await ledger.sweep_expired()

    assert deleted == 1
    result = await session.execute(select(Otp))
    assert [record.phone for record in result.scalars().all()] == ["9000000002"]

@pytest.mark.asyncio
async def test_stored_timestamps_round_trip(ledger, engine):
    issued = await ledger.issue("9000000001", "login")

    async with async_sessionmaker(engine, expire_on_commit=False)() as fresh:
        result = await fresh.execute(select(Otp).where(Otp.phone == "9000000001"))
        record = result.scalars().one()

    assert record.expires_at == issued.expires_at
    assert record.created_at < record.expires_at
    assert record.expires_at - record.created_at == timedelta(minutes=ledger.ttl_minutes)

@pytest.mark.asyncio
async def test_concurrent_issue_leaves_one_record(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'otp.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

    async def issue_in_own_session():
        async with SessionLocal() as own_session:
            ledger = OTPLedger(own_session, FakeSmsSender(), secret_key=settings.SECRET_KEY)
            return await ledger.issue("9000000001", "login")

    try:
        first, second = await asyncio.gather(issue_in_own_session(), issue_in_own_session())

        async with SessionLocal() as check:
            result = await check.execute(select(Otp).where(Otp.phone == "9000000001", Otp.purpose == "login"))
            records = result.scalars().all()
    finally:
        await engine.dispose()

    assert len(records) == 1
    assert records[0].code_hash in {hash_otp(first.code, settings.SECRET_KEY), hash_otp(second.code, settings.SECRET_KEY)}

@pytest.mark.asyncio
async def test_worker_sweep_deletes_expired_records(ledger, session, engine):
    await ledger.issue("9000000001", "login")
    await ledger.issue("9000000002", "login")
    await expire(session, "9000000001", "login")

    deleted = await worker._sweep(async_sessionmaker(engine, expire_on_commit=False))

    assert deleted == 1
    result = await session.execute(select(Otp.phone))
    assert result.scalars().all() == ["9000000002"]
