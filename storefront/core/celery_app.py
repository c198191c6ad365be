from celery import Celery
from storefront.core.config import settings

celery_app = Celery(
    "storefront",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["storefront.worker"],
)

celery_app.conf.beat_schedule = {
    "sweep-expired-otps": {
        "task": "storefront.worker.sweep_expired_otps",
        "schedule": settings.OTP_SWEEP_INTERVAL_MINUTES * 60,
    },
}
celery_app.conf.timezone = "UTC"
