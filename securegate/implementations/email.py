"""
Email backends.

Actual mail transport is left to the deployment; these backends cover
local development (console) and tests (memory).
"""

import uuid

import structlog

from securegate.core.config import settings
from securegate.core.interfaces.email import DeliveryReceipt, EmailBackend, OutgoingEmail

logger = structlog.get_logger()


def default_sender() -> str:
    return f"{settings.email.from_name} <{settings.email.from_address}>"


class ConsoleEmailBackend:
    """Writes outgoing mail to the log instead of sending it."""

    async def send(self, message: OutgoingEmail) -> DeliveryReceipt:
        receipt = DeliveryReceipt(message_id=uuid.uuid4().hex)
        logger.info(
            "email.sent",
            message_id=receipt.message_id,
            sender=message.sender or default_sender(),
            recipient=message.recipient,
            subject=message.subject,
            body=message.text,
        )
        return receipt


class MemoryEmailBackend:
    """Keeps sent messages in a list (for tests)."""

    def __init__(self) -> None:
        self.outbox: list[OutgoingEmail] = []

    async def send(self, message: OutgoingEmail) -> DeliveryReceipt:
        message.sender = message.sender or default_sender()
        self.outbox.append(message)
        return DeliveryReceipt(message_id=uuid.uuid4().hex)

    def last(self) -> OutgoingEmail | None:
        return self.outbox[-1] if self.outbox else None

    def clear(self) -> None:
        self.outbox.clear()


_BACKENDS = {
    "console": ConsoleEmailBackend,
    "memory": MemoryEmailBackend,
}

_instance: EmailBackend | None = None


def get_email_backend() -> EmailBackend:
    """Return the process-wide email backend selected by ``EMAIL_BACKEND``."""
    global _instance
    if _instance is None:
        _instance = _BACKENDS[settings.email.backend]()
    return _instance
