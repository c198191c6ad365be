import re
from typing import List, Tuple
from httpx import AsyncClient

from storefront.core.config import settings
from storefront.services.sms import SmsResult

class FakeSmsSender:
    """Records outgoing messages instead of calling the gateway."""

    def __init__(self):
        self.messages: List[Tuple[str, str]] = []
        self.fail = False

    async def send_sms(self, recipient: str, message: str) -> SmsResult:
        self.messages.append((recipient, message))
        if self.fail:
            return SmsResult(success=False, message="Failed to send SMS")
        return SmsResult(success=True, message="SMS sent successfully")

    def last_code(self, phone: str) -> str:
        for recipient, message in reversed(self.messages):
            if recipient == phone:
                return re.search(r"\b\d{6}\b", message).group(0)
        raise AssertionError(f"No SMS sent to {phone}")

def other_code(code: str) -> str:
    return f"{(int(code) + 1) % 1_000_000:06d}"

async def register_user(client: AsyncClient, phone: str = "9000000001", name: str = "Asha Rao", email: str | None = None):
    payload = {"name": name, "phone": phone}
    if email:
        payload["email"] = email
    resp = await client.post(f"{settings.API_V1_STR}/auth/register", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]

async def register_and_verify(client: AsyncClient, sms: FakeSmsSender, phone: str = "9000000001", name: str = "Asha Rao"):
    await register_user(client, phone=phone, name=name)
    resp = await client.post(f"{settings.API_V1_STR}/auth/verify-otp", json={
        "phone": phone,
        "otp": sms.last_code(phone),
    })
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]

async def create_user_and_get_headers(client: AsyncClient, sms: FakeSmsSender, phone: str = "9000000001", name: str = "Asha Rao"):
    data = await register_and_verify(client, sms, phone=phone, name=name)
    return data["user"], {"Authorization": f"Bearer {data['access_token']}"}
