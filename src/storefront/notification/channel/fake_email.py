"""Fake email adapter — keeps an outbox instead of sending."""

from uuid import uuid4

from storefront.notification.channel.email_port import EmailPort, EmailReceipt, OrderEmail


class FakeEmailAdapter(EmailPort):
    def __init__(self):
        self.outbox: list[OrderEmail] = []
        self.should_succeed = True
        self.failure_reason = "Mailbox unavailable"

    def configure(self, should_succeed: bool, failure_reason: str = "Mailbox unavailable") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def deliver(self, email: OrderEmail) -> EmailReceipt:
        if not self.should_succeed:
            return EmailReceipt(delivered=False, error=self.failure_reason)

        self.outbox.append(email)
        return EmailReceipt(delivered=True, message_id=f"email-{uuid4().hex[:12]}")

    def emails_for(self, order_id: str) -> list[OrderEmail]:
        return [email for email in self.outbox if email.order_id == order_id]
