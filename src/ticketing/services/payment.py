from eventhub.settings import ACTIVE_PAYMENT_GATEWAY
from ticketing.pg import PAYMENT_GATEWAYS


class PaymentService:
    pg = None
    pg_name = None

    def __init__(self, pg_name=None):
        self.pg_name = pg_name if pg_name else ACTIVE_PAYMENT_GATEWAY
        if self.pg_name not in PAYMENT_GATEWAYS:
            raise ValueError(f"Unknown payment gateway: {self.pg_name}")
        self.pg = PAYMENT_GATEWAYS[self.pg_name].get_instance()

    @property
    def key_id(self):
        return self.pg.key_id

    def create_payment_order(self, amount, receipt, notes=None, customer=None):
        return self.pg.create_order(amount, receipt, notes, customer)

    def confirm_payment(self, order_id, payment_id, signature):
        return self.pg.confirm_payment(order_id, payment_id, signature)

    def refund_payment(self, payment_id, amount=None):
        return self.pg.refund_payment(payment_id, amount)

    def get_webhook_details(self, payload, signature):
        return self.pg.get_webhook_details(payload, signature)

    def check_status(self, transaction_id):
        return self.pg.check_status(transaction_id)
