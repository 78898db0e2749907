"""Email channel port — how order notifications leave the system."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class OrderEmail:
    order_id: str
    to: str
    subject: str
    body: str


@dataclass(frozen=True)
class EmailReceipt:
    delivered: bool
    message_id: str | None = None
    error: str | None = None


class EmailPort(ABC):
    """Delivers customer-facing order emails.

    Adapters report delivery problems through the receipt; raising is
    reserved for transport failures.
    """

    @abstractmethod
    def deliver(self, email: OrderEmail) -> EmailReceipt: ...
