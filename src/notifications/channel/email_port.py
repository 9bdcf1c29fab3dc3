"""Email channel port."""

from abc import ABC, abstractmethod


class EmailPort(ABC):
    """Abstract interface for email dispatch adapters."""

    @abstractmethod
    def send(self, recipient: str, subject: str, body: str) -> dict:
        """Send a message to ``recipient``.

        Returns a dict with ``message_id``, ``status`` ("sent" or "failed")
        and, on failure, ``error``.
        """
        ...
