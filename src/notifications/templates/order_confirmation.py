"""Order confirmation template — sent when an order is placed."""

from notifications.notification.notification import (
    NotificationChannel,
    NotificationType,
)


class OrderConfirmationTemplate:
    notification_type = NotificationType.ORDER_CONFIRMATION.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_code = context.get("order_code", "N/A")
        amount_payable = context.get("amount_payable", "0.00")
        item_count = context.get("item_count", 0)
        return {
            "subject": f"Order #{order_code} Received",
            "body": (
                f"We have received your order #{order_code} ({item_count} item(s)).\n\n"
                f"Amount due: {amount_payable}\n"
                f"Payment method: {context.get('payment_method', 'N/A')}\n\n"
                "We'll let you know as soon as it is on its way."
            ),
        }
