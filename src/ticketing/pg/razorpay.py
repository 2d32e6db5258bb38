import json
import logging
import razorpay
from razorpay.errors import (
    SignatureVerificationError,
    BadRequestError,
    GatewayError,
    ServerError,
)
from .base import (
    BasePaymentGateway,
    WebhookPayload,
    WebhookEvent,
    PaymentOrderStatus,
    PaymentOrder,
    PaymentGatewayError,
)
from eventhub.settings import (
    RAZORPAY_API_KEY,
    RAZORPAY_API_SECRET,
    RAZORPAY_WEBHOOK_SECRET,
    PAYMENT_CURRENCY,
    SITE_NAME,
)

logger = logging.getLogger(__name__)


class RazorpayPaymentGateway(BasePaymentGateway):
    client = None

    def setup(self):
        client = razorpay.Client(auth=(RAZORPAY_API_KEY, RAZORPAY_API_SECRET))
        client.set_app_details({"title": SITE_NAME, "version": "1.0"})
        self.client = client

    @property
    def key_id(self):
        return RAZORPAY_API_KEY

    def create_order(self, amount, receipt, notes=None, customer=None):
        # Amount in paise
        try:
            order = self.client.order.create(
                {
                    "amount": int(amount),
                    "currency": PAYMENT_CURRENCY,
                    "receipt": str(receipt),
                    "notes": notes or {},
                    "payment_capture": 1,
                }
            )
        except (BadRequestError, GatewayError, ServerError) as e:
            logger.error("Failed to create Razorpay order for %s: %s", receipt, e)
            raise PaymentGatewayError("Failed to create order") from e
        return PaymentOrder(
            id=order["id"],
            amount=order.get("amount", int(amount)),
            currency=order.get("currency", PAYMENT_CURRENCY),
            status=PaymentOrderStatus.PENDING,
            notes=notes or {},
        )

    def confirm_payment(self, order_id, payment_id, signature) -> bool:
        """
        Checks the checkout signature, HMAC-SHA256 of ``order_id|payment_id``
        keyed with the API secret.
        """
        try:
            self.client.utility.verify_payment_signature(
                {
                    "razorpay_order_id": order_id,
                    "razorpay_payment_id": payment_id,
                    "razorpay_signature": signature,
                }
            )
            return True
        except SignatureVerificationError as e:
            logger.warning("Razorpay signature mismatch for order %s: %s", order_id, e)
            return False

    def refund_payment(self, payment_id, amount=None) -> bool:
        data = {"amount": int(amount)} if amount else {}
        try:
            self.client.payment.refund(payment_id, data)
            return True
        except Exception as e:
            logger.error("Failed to refund Razorpay payment %s: %s", payment_id, e)
            return False

    def get_webhook_details(self, payload, signature) -> WebhookPayload:
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")
        if not signature:
            raise PaymentGatewayError("Missing webhook signature")
        try:
            self.client.utility.verify_webhook_signature(
                payload, signature, RAZORPAY_WEBHOOK_SECRET
            )
        except SignatureVerificationError as e:
            raise PaymentGatewayError("Invalid webhook signature") from e

        payload_data = json.loads(payload)
        event = payload_data.get("event")

        webhook_event = WebhookEvent.NO_OP
        data = {}

        if event in ("payment.captured", "payment.failed"):
            entity = payload_data["payload"]["payment"]["entity"]
            webhook_event = (
                WebhookEvent.PAYMENT_SUCCESS
                if event == "payment.captured"
                else WebhookEvent.PAYMENT_FAILED
            )
            data["payment_id"] = entity["id"]
            data["order_id"] = entity.get("order_id")
            data["amount"] = entity.get("amount")

        return WebhookPayload(event=webhook_event, data=data)
