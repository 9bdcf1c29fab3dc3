"""In-memory email adapter used in development and tests."""

from itertools import count

from notifications.channel.email_port import EmailPort


class FakeEmailAdapter(EmailPort):
    def __init__(self):
        self.sent: list[dict] = []
        self.fail_with: Exception | None = None
        self._ids = count(1)

    def send(self, recipient: str, subject: str, body: str) -> dict:
        if self.fail_with is not None:
            raise self.fail_with

        message_id = f"email-{next(self._ids)}"
        self.sent.append({"message_id": message_id, "recipient": recipient, "subject": subject, "body": body})
        return {"message_id": message_id, "status": "sent"}

    def reset(self):
        self.sent.clear()
        self.fail_with = None
