# directsource/services/notification_service.py
from directsource.celery_worker import celery_app
from directsource.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysylania powiadomien o zamowieniach.
    Uzywa Celery do asynchronicznego przetwarzania.
    """

    @staticmethod
    def send_order_placed(customer_id: str, order_id: str, manufacturer_id: str):
        send_order_notification_task.delay(customer_id, order_id, "placed", manufacturer_id)

    @staticmethod
    def send_status_changed(customer_id: str, order_id: str, status: str):
        send_order_notification_task.delay(customer_id, order_id, status)


@celery_app.task(name="directsource.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: str, order_id: str, event: str, manufacturer_id: str | None = None):
    """
    Celery task - w prawdziwym systemie wyslalby email/push.
    Teraz tylko loguje.
    """
    if event == "placed":
        logger.info(f"[NOTIFICATION] User {user_id}: Order {order_id} placed with manufacturer {manufacturer_id}")
    else:
        logger.info(f"[NOTIFICATION] User {user_id}: Order {order_id} status changed to {event}")

    return {"user_id": user_id, "order_id": order_id, "event": event, "status": "sent"}
