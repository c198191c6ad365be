from sqlmodel import SQLModel

class TokenPayload(SQLModel):
    """
    Schema for decoding JWT payload.
    """
    sub: str | None = None
    role: str | None = None
    phone: str | None = None
