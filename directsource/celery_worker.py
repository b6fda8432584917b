# directsource/celery_worker.py
from celery import Celery

from directsource.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "directsource",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# Explicite importuj taski, zeby Celery je zarejestrowal
celery_app.conf.imports = (
    "directsource.services.notification_service",
)

celery_app.conf.timezone = "UTC"
