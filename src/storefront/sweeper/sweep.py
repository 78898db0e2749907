"""Reconciliation sweeper for pending Pix orders.

Pix confirmations can be lost or delayed. The sweeper asks the gateway
about every pending Pix order that holds a charge id and, for charges
reported paid, applies the same guarded transition as the webhook.
Running it alongside webhooks, or twice in a row, is harmless.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from storefront.errors import GatewayError
from storefront.gateway import get_pix_gateway
from storefront.order.order import Order
from storefront.order.payment import ConfirmationOutcome, ConfirmOrderPayment

logger = structlog.get_logger(__name__)


@dataclass
class SweepReport:
    checked: int = 0
    advanced: int = 0
    already_confirmed: int = 0
    unpaid: int = 0
    failed: int = 0


def sweep_pending_pix_orders(gateway=None) -> SweepReport:
    gateway = gateway or get_pix_gateway()
    report = SweepReport()

    for order in current_domain.repository_for(Order).pending_pix_orders():
        report.checked += 1
        try:
            status = gateway.check_charge(order.external_reference)
        except GatewayError as exc:
            logger.error(
                "Could not check Pix charge",
                order_id=str(order.id),
                charge_id=order.external_reference,
                error=exc.message,
            )
            report.failed += 1
            continue

        if not status.paid:
            report.unpaid += 1
            continue

        try:
            outcome = current_domain.process(
                ConfirmOrderPayment(order_id=order.id, source="sweeper"),
                asynchronous=False,
            )
        except ExpectedVersionError:
            # Another caller committed the transition first
            outcome = ConfirmationOutcome.ALREADY_CONFIRMED.value

        if outcome == ConfirmationOutcome.ADVANCED.value:
            report.advanced += 1
        else:
            report.already_confirmed += 1

    logger.info(
        "Pix sweep finished",
        checked=report.checked,
        advanced=report.advanced,
        already_confirmed=report.already_confirmed,
        unpaid=report.unpaid,
        failed=report.failed,
    )
    return report
