"""Order notifier — turns committed order events into customer messages.

Runs strictly after the order transaction has committed. A failed send is
logged and dropped; it never reaches the caller, so a flaky mail provider
cannot fail or roll back an order.
"""

from collections.abc import Callable

import structlog

from notifications.channel import get_channel
from notifications.notification.notification import NotificationType
from notifications.templates import get_template
from ordering.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged

logger = structlog.get_logger(__name__)

_EVENT_TYPES = {
    OrderPlaced: NotificationType.ORDER_CONFIRMATION,
    OrderCancelled: NotificationType.ORDER_CANCELLATION,
    OrderStatusChanged: NotificationType.ORDER_STATUS_UPDATE,
}


def _default_recipient(user_id: int) -> str:
    return f"user-{user_id}"


class OrderNotifier:
    def __init__(self, recipient_for: Callable[[int], str] = _default_recipient) -> None:
        self._recipient_for = recipient_for

    def notify(self, event) -> None:
        notification_type = _EVENT_TYPES.get(type(event))
        if notification_type is None:
            logger.warning("No notification for event", event_type=type(event).__name__)
            return

        template = get_template(notification_type.value)
        context = {key: str(value) for key, value in vars(event).items()}
        rendered = template.render(context)

        for channel_type in template.default_channels:
            try:
                adapter = get_channel(channel_type)
                result = adapter.send(
                    recipient=self._recipient_for(event.user_id),
                    subject=rendered["subject"],
                    body=rendered["body"],
                )
            except Exception as e:
                logger.error(
                    "Notification dispatch failed",
                    order_code=event.order_code,
                    notification_type=notification_type.value,
                    channel=channel_type,
                    error=str(e),
                )
                continue

            logger.info(
                "Notification sent",
                order_code=event.order_code,
                notification_type=notification_type.value,
                channel=channel_type,
                message_id=result.get("message_id"),
            )
