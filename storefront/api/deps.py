import uuid
from typing import Annotated
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.core.security import SessionIssuer
from storefront.db.session import get_db
from storefront.models.user import User
from storefront.services.addresses import AddressBook
from storefront.services.fixtures import FixtureIdentity, fixture_identity_from_settings
from storefront.services.identity import IdentityService
from storefront.services.otp import OTPLedger
from storefront.services.sms import Fast2SmsGateway, SmsSender

reuseable_oauth2 = HTTPBearer(auto_error=False)

def get_sms_sender() -> SmsSender:
    return Fast2SmsGateway.from_settings(settings)

def get_session_issuer() -> SessionIssuer:
    return SessionIssuer.from_settings(settings)

def get_fixture_identity() -> FixtureIdentity | None:
    return fixture_identity_from_settings(settings)

def get_otp_ledger(
    session: Annotated[AsyncSession, Depends(get_db)],
    sms: Annotated[SmsSender, Depends(get_sms_sender)],
) -> OTPLedger:
    return OTPLedger(session, sms, secret_key=settings.SECRET_KEY, ttl_minutes=settings.OTP_EXPIRY_MINUTES)

def get_identity_service(
    session: Annotated[AsyncSession, Depends(get_db)],
    ledger: Annotated[OTPLedger, Depends(get_otp_ledger)],
    issuer: Annotated[SessionIssuer, Depends(get_session_issuer)],
    fixture: Annotated[FixtureIdentity | None, Depends(get_fixture_identity)],
) -> IdentityService:
    return IdentityService(session, ledger, issuer, settings, fixture=fixture)

def get_address_book(session: Annotated[AsyncSession, Depends(get_db)]) -> AddressBook:
    return AddressBook(session)

async def get_current_user(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
    issuer: Annotated[SessionIssuer, Depends(get_session_issuer)],
    token: Annotated[HTTPAuthorizationCredentials | None, Depends(reuseable_oauth2)],
) -> User:
    raw_token = token.credentials if token else request.cookies.get(settings.TOKEN_COOKIE_NAME)
    if not raw_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    try:
        token_data = issuer.decode(raw_token)
    except (JWTError, ValidationError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Could not validate credentials")

    user = await session.get(User, _parse_uuid(token_data.sub))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated. Please contact support.")
    return user

def _parse_uuid(value: str | None) -> uuid.UUID:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Could not validate credentials")
