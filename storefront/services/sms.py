import logging
import re
from dataclasses import dataclass
from typing import Dict, Protocol

import httpx

from storefront.core.config import Settings
from storefront.models.enums import OtpPurpose

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PURPOSE_LABELS = {
    OtpPurpose.REGISTER: "registration",
    OtpPurpose.LOGIN: "login",
    OtpPurpose.RESET: "password reset",
}

@dataclass
class SmsResult:
    success: bool
    message: str

class SmsSender(Protocol):
    """Anything able to deliver a text message to a phone number."""

    async def send_sms(self, recipient: str, message: str) -> SmsResult:
        ...

class Fast2SmsGateway:
    """
    Sends SMS through the Fast2SMS DLT route.

    The DLT template only takes the variable part, so the OTP digits are
    extracted from the message text before sending.
    """

    def __init__(self, api_url: str, api_key: str | None, sender_id: str | None, template_id: str | None, timeout: float = 10.0):
        self.api_url = api_url
        self.api_key = api_key
        self.sender_id = sender_id
        self.template_id = template_id
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "Fast2SmsGateway":
        return cls(
            api_url=settings.SMS_API_URL,
            api_key=settings.FAST2SMS_API_KEY,
            sender_id=settings.FAST2SMS_SENDER_ID,
            template_id=settings.FAST2SMS_TEMPLATE_ID,
            timeout=settings.SMS_TIMEOUT_SECONDS,
        )

    def get_headers(self) -> Dict[str, str]:
        return {
            "authorization": self.api_key or "",
            "Content-Type": "application/json",
        }

    async def send_sms(self, recipient: str, message: str) -> SmsResult:
        match = re.search(r"\d{4,6}", message)
        payload = {
            "route": "dlt",
            "sender_id": self.sender_id,
            "message": self.template_id,
            "variables_values": match.group(0) if match else "",
            "flash": 0,
            "numbers": recipient,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.api_url, json=payload, headers=self.get_headers())
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("SMS to %s failed: %s", recipient, e)
            return SmsResult(success=False, message="Failed to send SMS")

        logger.info("Fast2SMS response [%s]: %s", response.status_code, response.text)
        return SmsResult(success=True, message="SMS sent successfully")

def format_otp_message(code: str, purpose: str, expiry_minutes: int) -> str:
    label = PURPOSE_LABELS.get(purpose, str(purpose))
    return f"Your OTP for {label} is {code}. Valid for {expiry_minutes} minute(s)."
