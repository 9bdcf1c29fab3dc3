"""Template registry — maps NotificationType to template classes."""

from notifications.notification.notification import NotificationType
from notifications.templates.order_cancellation import OrderCancellationTemplate
from notifications.templates.order_confirmation import OrderConfirmationTemplate
from notifications.templates.order_status_update import OrderStatusUpdateTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.ORDER_CONFIRMATION.value: OrderConfirmationTemplate,
    NotificationType.ORDER_CANCELLATION.value: OrderCancellationTemplate,
    NotificationType.ORDER_STATUS_UPDATE.value: OrderStatusUpdateTemplate,
}


def get_template(notification_type: str) -> type:
    """Look up the template class for a notification type."""
    template = TEMPLATE_REGISTRY.get(notification_type)
    if template is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template
