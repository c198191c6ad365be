import hashlib
import hmac
from datetime import timedelta

from jose import jwt

from storefront.core.config import Settings
from storefront.models.user import User
from storefront.schemas.token import TokenPayload
from storefront.utils.dates import utc_now

class SessionIssuer:
    """
    Mints and decodes the signed session tokens handed out after verification.

    Tokens are stateless: they carry the user id, role and phone as claims and
    are never stored server side.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60 * 24 * 7):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionIssuer":
        return cls(settings.SECRET_KEY, settings.ALGORITHM, settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    def issue(self, user: User) -> str:
        """
        Creates a JWT session token for the given user.
        """
        expire = utc_now() + timedelta(minutes=self.expire_minutes)
        to_encode = {
            "exp": expire,
            "sub": str(user.id),
            "role": str(user.role),
            "phone": user.phone,
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)

    def decode(self, token: str) -> TokenPayload:
        """
        Verifies a token and returns its claims.

        Raises jose.JWTError if the signature is wrong or the token has expired.
        """
        payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        return TokenPayload(**payload)

def hash_otp(code: str, secret_key: str) -> str:
    """
    Keyed hash of an OTP code, so stored records never reveal the code.
    """
    return hmac.new(secret_key.encode("utf-8"), msg=code.encode("utf-8"), digestmod=hashlib.sha256).hexdigest()

def otp_matches(code: str, code_hash: str, secret_key: str) -> bool:
    return hmac.compare_digest(hash_otp(code, secret_key), code_hash)
