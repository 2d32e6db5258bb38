import logging
from django.db.models import Q
from ticketing.pg import WebhookEvent
from .order import OrderService
from .payment import PaymentService

logger = logging.getLogger(__name__)


class WebhookService:
    def __init__(self, order_service=None):
        self.order_service = order_service or OrderService()

    def _ticket_query(self, pg_name, data):
        if pg_name == "razorpay":
            return Q(razorpay_order_id=data["order_id"])
        return Q(pk=data["transaction_id"])

    def process_pg_webhook(self, pg_name, payload, signature):
        """
        Verify and apply a gateway notification. Returns the parsed
        ``WebhookPayload`` so callers can build gateway specific responses.
        """
        payment_service = PaymentService(pg_name)
        webhook_details = payment_service.get_webhook_details(payload, signature)
        data = webhook_details.data
        if pg_name == "razorpay" and webhook_details.event != WebhookEvent.NO_OP and not data.get("order_id"):
            logger.warning("Razorpay payment %s has no order id", data.get("payment_id"))
            return webhook_details

        if webhook_details.event == WebhookEvent.PAYMENT_SUCCESS:
            self.order_service.confirm_tickets(
                self._ticket_query(pg_name, data),
                pg_name,
                payment_id=data.get("payment_id"),
                order_id=data.get("order_id"),
            )
        elif webhook_details.event == WebhookEvent.PAYMENT_FAILED:
            cancelled = self.order_service.fail_tickets(self._ticket_query(pg_name, data))
            logger.info("Payment failed on %s, cancelled %s tickets", pg_name, cancelled)
        elif webhook_details.event == WebhookEvent.PAYMENT_PENDING:
            logger.info("Payment pending on %s: %s", pg_name, data)
        return webhook_details
