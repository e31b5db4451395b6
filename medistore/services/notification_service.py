# medistore/services/notification_service.py
from kombu.exceptions import OperationalError as BrokerError

from medistore.celery_worker import celery_app
from medistore.utils.logging import get_logger

logger = get_logger(__name__)

ORDER_PLACED = "ORDER_PLACED"
STATUS_CHANGED = "STATUS_CHANGED"
ORDER_CANCELLED = "ORDER_CANCELLED"


class NotificationService:
    """
    Fire-and-forget order notifications, queued through Celery.
    Called after commit; a broker outage is logged and never fails the
    request that triggered it.
    """

    def order_placed(self, user_id: int, order_id: int) -> None:
        self._enqueue(user_id, order_id, ORDER_PLACED, "PLACED")

    def status_changed(self, user_id: int, order_id: int, status: str) -> None:
        self._enqueue(user_id, order_id, STATUS_CHANGED, status)

    def order_cancelled(self, user_id: int, order_id: int) -> None:
        self._enqueue(user_id, order_id, ORDER_CANCELLED, "CANCELLED")

    @staticmethod
    def _enqueue(user_id: int, order_id: int, event: str, status: str) -> None:
        try:
            send_order_notification_task.delay(user_id, order_id, event, status)
        except BrokerError as e:
            logger.warning(
                f"Could not queue {event} notification for order {order_id}: {e}",
                extra={"order_id": order_id, "user_id": user_id, "operation": event},
            )


@celery_app.task(name="medistore.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_id: int, event: str, status: str):
    """
    Celery task. Delivery (email/SMS/push) is not part of this service,
    the task only records the event.
    """
    logger.info(
        f"[NOTIFICATION] User {user_id}: order {order_id} {event} ({status})",
        extra={"order_id": order_id, "user_id": user_id, "operation": event, "status": status},
    )

    return {"user_id": user_id, "order_id": order_id, "event": event, "status": status}
