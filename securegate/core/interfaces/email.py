"""
Outgoing email contract.

The service only ever sends transactional mail (password reset links),
so a message is a single recipient with a plain-text body and an
optional HTML alternative.

Implementations: ConsoleEmailBackend, MemoryEmailBackend
"""

from dataclasses import dataclass
from typing import Protocol


@dataclass
class OutgoingEmail:
    """A message ready for delivery."""

    recipient: str
    subject: str
    text: str
    html: str | None = None
    sender: str | None = None  # backend default when unset


@dataclass(frozen=True)
class DeliveryReceipt:
    message_id: str
    accepted: bool = True
    error: str | None = None


class EmailBackend(Protocol):
    """Anything that can deliver an ``OutgoingEmail``."""

    async def send(self, message: OutgoingEmail) -> DeliveryReceipt:
        ...
