from slowapi import Limiter
from slowapi.util import get_remote_address
from storefront.core.config import settings

# Global Rate Limiter instance keyed on the remote address
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
)
