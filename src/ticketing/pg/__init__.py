from .razorpay import RazorpayPaymentGateway
from .phonepe import PhonePePaymentGateway
from .base import (
    BasePaymentGateway,
    PaymentGatewayError,
    WebhookPayload,
    WebhookEvent,
    PaymentOrderStatus,
    PaymentOrder,
)

PAYMENT_GATEWAYS = {
    "razorpay": RazorpayPaymentGateway,
    "phonepe": PhonePePaymentGateway,
}

AVAILABLE_PAYMENT_GATEWAYS = list(PAYMENT_GATEWAYS.keys())
