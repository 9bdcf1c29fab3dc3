"""Order status update template — sent when delivery starts or completes."""

from notifications.notification.notification import (
    NotificationChannel,
    NotificationType,
)

_MESSAGES = {
    "Delivering": "is on its way",
    "Succeeded": "has been delivered",
}


class OrderStatusUpdateTemplate:
    notification_type = NotificationType.ORDER_STATUS_UPDATE.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_code = context.get("order_code", "N/A")
        status = context.get("new_status", "")
        phrase = _MESSAGES.get(status, f"is now {status.lower()}")
        return {
            "subject": f"Order #{order_code} Update",
            "body": f"Your order #{order_code} {phrase}.",
        }
