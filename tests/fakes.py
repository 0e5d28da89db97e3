import threading
from decimal import Decimal

from banks.librapay.models import LibraPayTransaction
from banks.librapay.response import LibraPayResponse
from banks.librapay.signer import response_fields, sign
from utils.interfaces import PaymentPlatform, TransactionHandler

SHARED_SECRET = '00112233445566778899AABBCCDDEEFF'
WRONG_SECRET = 'FFEEDDCCBBAA99887766554433221100'

GATEWAY_CONFIGURATION = {
    'enabled': True,
    'terminal_id': '12345678',
    'merchant_id': '000000012345678',
    'merchant_name': 'Axel eLearning',
    'merchant_url': 'https://lms.example.com',
    'merchant_email': 'payments@lms.example.com',
    'shared_secret': SHARED_SECRET,
    'test_mode': True,
}


class InMemoryPlatform(PaymentPlatform):
    def __init__(self, configuration=None, amount=Decimal('10.00'), currency='RON', surcharge=0):
        self.configuration = dict(GATEWAY_CONFIGURATION) if configuration is None else configuration
        self.amount = amount
        self.currency = currency
        self.surcharge = surcharge
        self.payments = []
        self.deliveries = []
        self.notifications = []

    def get_gateway_configuration(self, component, payment_area, item_id, gateway):
        return self.configuration

    def get_payable(self, component, payment_area, item_id):
        return {'amount': self.amount, 'currency': self.currency, 'account': 1}

    def get_gateway_surcharge(self, gateway):
        return self.surcharge

    def get_success_url(self, component, payment_area, item_id):
        return f'https://lms.example.com/{component}/{payment_area}/{item_id}/'

    def payment_exists(self, component, payment_area, item_id, user_id, gateway):
        return (component, payment_area, item_id, user_id, gateway) in [payment[1:6] for payment in self.payments]

    def save_payment(self, account_id, component, payment_area, item_id, user_id, amount, currency, gateway):
        self.payments.append((account_id, component, payment_area, item_id, user_id, gateway, amount, currency))
        return len(self.payments)

    def deliver_order(self, component, payment_area, item_id, payment_id, user_id):
        self.deliveries.append((component, payment_area, item_id, payment_id, user_id))

    def send_user_notification(self, user_id, kind, data):
        self.notifications.append((user_id, kind, data))


class InMemoryTransactionHandler(TransactionHandler):
    """thread safe store holding unsaved LibraPayTransaction instances"""

    def __init__(self):
        self.rows = {}
        self.lock = threading.Lock()

    def __call__(self):
        return self

    def create_transaction(self, **fields):
        transaction = LibraPayTransaction(**fields)
        with self.lock:
            self.rows[transaction.order_id] = transaction
        return transaction

    def update_transaction(self, transaction, update_fields):
        with self.lock:
            for name, value in update_fields.items():
                setattr(transaction, name, value)
        return transaction

    def find_transaction(self, **lookup):
        with self.lock:
            for transaction in self.rows.values():
                if all(getattr(transaction, name) == value for name, value in lookup.items()):
                    return transaction
        return None

    def transaction_exists(self, **lookup):
        return self.find_transaction(**lookup) is not None

    def transition_status(self, transaction, from_status, to_status):
        with self.lock:
            if transaction.status != from_status:
                return False
            transaction.status = to_status
            return True


def response_params(order_id, action='0', rc='00', key=SHARED_SECRET, **overrides):
    params = {
        'TERMINAL': '12345678',
        'TRTYPE': '0',
        'ORDER': order_id,
        'AMOUNT': '10.00',
        'CURRENCY': 'RON',
        'DESC': 'Course fee',
        'ACTION': action,
        'RC': rc,
        'MESSAGE': 'Approved' if action == '0' else 'Declined',
        'RRN': '123456789012',
        'INT_REF': 'A1B2C3D4E5F6',
        'APPROVAL': '123456' if action == '0' else '',
        'TIMESTAMP': '20260122101500',
        'NONCE': '0123456789abcdef0123456789abcdef',
    }
    params.update(overrides)
    response = LibraPayResponse.from_params(params)
    params['P_SIGN'] = sign(response_fields(response), key)
    return params


def signed_response(order_id, action='0', rc='00', key=SHARED_SECRET, **overrides):
    return LibraPayResponse.from_params(response_params(order_id, action, rc, key, **overrides))
