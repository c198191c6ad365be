from typing import Annotated, Any
from fastapi import APIRouter, Depends, Request, Response, status

from storefront.api import deps
from storefront.core.config import settings
from storefront.core.rate_limit import limiter
from storefront.models.user import User
from storefront.schemas.auth import (
    AuthSession,
    LoginRequest,
    OtpDispatched,
    RegisterRequest,
    RegistrationStarted,
    ResendOtpRequest,
    VerifyOtpRequest,
)
from storefront.schemas.response import APIResponse
from storefront.schemas.user import CompleteProfileRequest, UserProfile, UserUpdate
from storefront.services.identity import IdentityService

router = APIRouter()

Identity = Annotated[IdentityService, Depends(deps.get_identity_service)]
CurrentUser = Annotated[User, Depends(deps.get_current_user)]

def set_token_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.TOKEN_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.TOKEN_COOKIE_SECURE,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )

@router.post("/register", response_model=APIResponse[RegistrationStarted], status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def register(request: Request, user_in: RegisterRequest, identity: Identity) -> Any:
    """
    Register a phone number and send a verification code.
    """
    started = await identity.start_registration(user_in)
    if started.is_test_user:
        message = "Test user registered. Use the fixed test OTP for verification."
    else:
        message = "Registration successful. OTP sent for verification."
    return APIResponse(message=message, data=started)

@router.post("/verify-otp", response_model=APIResponse[AuthSession])
async def verify_otp(body: VerifyOtpRequest, response: Response, identity: Identity) -> Any:
    """
    Complete registration with the received code and start a session.
    """
    session = await identity.complete_registration(body.phone, body.otp)
    set_token_cookie(response, session.access_token)
    return APIResponse(message="Registration completed successfully", data=session)

@router.post("/login", response_model=APIResponse[OtpDispatched])
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login(request: Request, body: LoginRequest, identity: Identity) -> Any:
    """
    Send a login code to a registered phone number.
    """
    dispatched = await identity.start_login(body.phone)
    if dispatched.is_test_user:
        message = "Test user detected. Use the fixed test OTP to login."
    else:
        message = "OTP sent for login verification"
    return APIResponse(message=message, data=dispatched)

@router.post("/verify-login", response_model=APIResponse[AuthSession])
async def verify_login(body: VerifyOtpRequest, response: Response, identity: Identity) -> Any:
    """
    Complete login with the received code and start a session.
    """
    session = await identity.complete_login(body.phone, body.otp)
    set_token_cookie(response, session.access_token)
    return APIResponse(message="Login successful", data=session)

@router.post("/resend-otp", response_model=APIResponse[OtpDispatched])
@limiter.limit(settings.OTP_RATE_LIMIT)
async def resend_otp(request: Request, body: ResendOtpRequest, identity: Identity) -> Any:
    """
    Replace any outstanding code for the phone and purpose with a new one.
    """
    dispatched = await identity.resend_otp(body.phone, body.purpose)
    return APIResponse(message="OTP resent successfully", data=dispatched)

@router.post("/logout", response_model=APIResponse[dict])
async def logout(response: Response, current_user: CurrentUser) -> Any:
    response.delete_cookie(settings.TOKEN_COOKIE_NAME)
    return APIResponse(message="Logged out successfully", data={})

@router.get("/me", response_model=APIResponse[UserProfile])
async def read_user_me(current_user: CurrentUser, identity: Identity) -> Any:
    """
    Get current user details.
    """
    return APIResponse(message="User details retrieved", data=identity.get_profile(current_user))

@router.put("/me", response_model=APIResponse[UserProfile])
async def update_user_me(user_in: UserUpdate, current_user: CurrentUser, identity: Identity) -> Any:
    """
    Update own profile.
    """
    profile = await identity.update_profile(current_user, user_in)
    return APIResponse(message="Profile updated successfully", data=profile)

@router.post("/complete-profile", response_model=APIResponse[UserProfile])
async def complete_profile(body: CompleteProfileRequest, current_user: CurrentUser, identity: Identity) -> Any:
    profile = await identity.complete_profile(current_user, body)
    return APIResponse(message="Profile completed successfully", data=profile)
