"""Order cancellation template — sent when a pending order is cancelled."""

from notifications.notification.notification import (
    NotificationChannel,
    NotificationType,
)


class OrderCancellationTemplate:
    notification_type = NotificationType.ORDER_CANCELLATION.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_code = context.get("order_code", "N/A")
        reason = context.get("reason") or "as requested"
        cancelled_by = context.get("cancelled_by", "customer")
        return {
            "subject": f"Order #{order_code} Cancelled",
            "body": (
                f"Your order #{order_code} has been cancelled.\n\n"
                f"Reason: {reason}\n"
                f"Cancelled by: {cancelled_by}\n\n"
                "Any voucher used on this order can be used again."
            ),
        }
