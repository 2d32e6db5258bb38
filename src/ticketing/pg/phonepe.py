import base64
import hashlib
import hmac
import json
import logging
import requests
from .base import (
    BasePaymentGateway,
    PaymentGatewayError,
    WebhookPayload,
    WebhookEvent,
    PaymentOrderStatus,
    PaymentOrder,
)
from eventhub.settings import (
    APP_URL,
    PAYMENT_MOCK_MODE,
    PHONEPE_API_URL,
    PHONEPE_MERCHANT_ID,
    PHONEPE_SALT_KEY,
    PHONEPE_SALT_INDEX,
    THIRD_PARTY_TIMEOUT_SECS,
)

logger = logging.getLogger(__name__)

PAY_ENDPOINT = "/pg/v1/pay"


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def generate_checksum(payload: str, endpoint: str = PAY_ENDPOINT) -> str:
    """X-VERIFY header: sha256(payload + endpoint + salt) + '###' + salt index."""
    return sha256_hex(payload + endpoint + PHONEPE_SALT_KEY) + "###" + str(PHONEPE_SALT_INDEX)


def verify_checksum(received: str, payload: str) -> bool:
    expected = sha256_hex(payload + PHONEPE_SALT_KEY)
    return hmac.compare_digest(expected, (received or "").split("###")[0])


class PhonePePaymentGateway(BasePaymentGateway):
    """
    PhonePe standard checkout. The merchant transaction id is the ticket id so
    callbacks can be matched without extra bookkeeping.
    """

    mock_mode = PAYMENT_MOCK_MODE

    def setup(self):
        pass

    @property
    def key_id(self):
        return PHONEPE_MERCHANT_ID

    def create_order(self, amount, receipt, notes=None, customer=None):
        transaction_id = str(receipt)
        customer = customer or {}
        if self.mock_mode:
            logger.info("Mock PhonePe payment for %s, amount %s", transaction_id, amount)
            return PaymentOrder(
                id=transaction_id,
                amount=amount,
                status=PaymentOrderStatus.PENDING,
                redirect_url=f"{APP_URL}/mock-payment?ticketId={transaction_id}&amount={amount}",
            )

        callback_url = f"{APP_URL}/api/phonepe/callback/"
        payload = {
            "merchantId": PHONEPE_MERCHANT_ID,
            "merchantTransactionId": transaction_id,
            "merchantUserId": f"USER_{transaction_id.replace('-', '')[:20]}",
            "amount": int(amount),
            "redirectUrl": callback_url,
            "redirectMode": "POST",
            "callbackUrl": callback_url,
            "mobileNumber": customer.get("phone") or "9999999999",
            "paymentInstrument": {"type": "PAY_PAGE"},
        }
        encoded = base64.b64encode(json.dumps(payload).encode("utf-8")).decode("utf-8")
        try:
            response = requests.post(
                f"{PHONEPE_API_URL}{PAY_ENDPOINT}",
                json={"request": encoded},
                headers={
                    "Content-Type": "application/json",
                    "X-VERIFY": generate_checksum(encoded),
                },
                timeout=THIRD_PARTY_TIMEOUT_SECS,
            )
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("PhonePe payment error for %s: %s", transaction_id, e)
            raise PaymentGatewayError("Failed to create payment") from e

        if not data.get("success"):
            raise PaymentGatewayError(data.get("message") or "Payment initiation failed")
        return PaymentOrder(
            id=transaction_id,
            amount=amount,
            status=PaymentOrderStatus.PENDING,
            redirect_url=data["data"]["instrumentResponse"]["redirectInfo"]["url"],
        )

    def get_webhook_details(self, payload, signature) -> WebhookPayload:
        """
        ``payload`` is the base64 ``response`` field of the callback body and
        ``signature`` the X-VERIFY header.
        """
        if not payload or not verify_checksum(signature, payload):
            raise PaymentGatewayError("Invalid checksum")
        try:
            decoded = json.loads(base64.b64decode(payload).decode("utf-8"))
        except (ValueError, TypeError) as e:
            raise PaymentGatewayError("Invalid callback data") from e

        transaction_id = (decoded.get("data") or {}).get("merchantTransactionId")
        if not transaction_id:
            raise PaymentGatewayError("Invalid callback data")

        code = decoded.get("code")
        if code == "PAYMENT_SUCCESS":
            event = WebhookEvent.PAYMENT_SUCCESS
        elif code == "PAYMENT_PENDING":
            event = WebhookEvent.PAYMENT_PENDING
        else:
            event = WebhookEvent.PAYMENT_FAILED
        data = decoded["data"]
        return WebhookPayload(
            event=event,
            data={
                "transaction_id": transaction_id,
                "payment_id": data.get("transactionId"),
                "amount": data.get("amount"),
                "code": code,
            },
        )

    def check_status(self, transaction_id):
        endpoint = f"/pg/v1/status/{PHONEPE_MERCHANT_ID}/{transaction_id}"
        checksum = sha256_hex(endpoint + PHONEPE_SALT_KEY) + "###" + str(PHONEPE_SALT_INDEX)
        try:
            response = requests.get(
                f"{PHONEPE_API_URL}{endpoint}",
                headers={
                    "Content-Type": "application/json",
                    "X-VERIFY": checksum,
                    "X-MERCHANT-ID": PHONEPE_MERCHANT_ID,
                },
                timeout=THIRD_PARTY_TIMEOUT_SECS,
            )
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("PhonePe status check failed for %s: %s", transaction_id, e)
            raise PaymentGatewayError("Failed to check status") from e
        return {
            "success": data.get("success", False),
            "status": data.get("code"),
            "data": data.get("data"),
        }

    def refund_payment(self, payment_id, amount=None):
        # Refunds are settled from the PhonePe merchant dashboard.
        logger.warning("PhonePe refund for %s must be issued from the dashboard", payment_id)
        return False
