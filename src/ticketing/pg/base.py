from dataclasses import dataclass, field
from typing import Optional
from enum import Enum


class WebhookEvent(Enum):
    PAYMENT_SUCCESS = "payment_success"
    PAYMENT_FAILED = "payment_failed"
    PAYMENT_PENDING = "payment_pending"
    NO_OP = "no_op"


@dataclass
class WebhookPayload:
    event: WebhookEvent
    data: dict


class PaymentOrderStatus(Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class PaymentOrder:
    id: str
    amount: int
    status: PaymentOrderStatus
    currency: str = "INR"
    redirect_url: Optional[str] = None
    notes: dict = field(default_factory=dict)


class PaymentGatewayError(Exception):
    pass


class BasePaymentGateway:

    def __init__(self):
        pass

    def setup(self):
        raise NotImplementedError

    _instance = None

    @classmethod
    def get_instance(cls):
        if not cls._instance:
            cls._instance = cls()
            cls._instance.setup()
        return cls._instance

    @property
    def key_id(self):
        return None

    def create_order(self, amount, receipt, notes=None, customer=None) -> PaymentOrder:
        raise NotImplementedError

    def confirm_payment(self, order_id: str, payment_id: str, signature: str) -> bool:
        raise NotImplementedError

    def refund_payment(self, payment_id: str, amount: Optional[int] = None) -> bool:
        raise NotImplementedError

    def get_webhook_details(self, payload, signature) -> WebhookPayload:
        raise NotImplementedError

    def check_status(self, transaction_id: str) -> dict:
        raise NotImplementedError
