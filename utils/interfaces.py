from abc import ABC, abstractmethod
from contextlib import nullcontext
from decimal import Decimal, ROUND_HALF_UP


class TransactionHandler(ABC):
    @abstractmethod
    def create_transaction(self, **fields):
        pass

    @abstractmethod
    def update_transaction(self, transaction, update_fields: dict):
        pass

    @abstractmethod
    def find_transaction(self, **lookup):
        """return the single transaction matching ``lookup`` or None"""

    @abstractmethod
    def transaction_exists(self, **lookup) -> bool:
        pass

    @abstractmethod
    def transition_status(self, transaction, from_status, to_status) -> bool:
        """
        set ``to_status`` only if the stored status is still ``from_status``.
        returns True when this call performed the transition.
        """

    def atomic(self):
        return nullcontext()

    def find_by_order_id(self, order_id):
        return self.find_transaction(order_id=order_id)

    def find_by_order_id_and_status(self, order_id, status):
        return self.find_transaction(order_id=order_id, status=status)

    def find_by_order_id_and_token_and_status(self, order_id, token, status):
        return self.find_transaction(order_id=order_id, token=token, status=status)

    def exists_by_order_id(self, order_id) -> bool:
        return self.transaction_exists(order_id=order_id)


class PaymentPlatform(ABC):
    """
    The host platform's payment subsystem as seen by a gateway.

    Implementations are looked up through the ``LIBRAPAY_PLATFORM`` setting
    (see ``banks.librapay.gateway.get_platform``).
    """

    @abstractmethod
    def get_gateway_configuration(self, component, payment_area, item_id, gateway) -> dict:
        """
        :return: dict with terminal_id, merchant_id, merchant_name, merchant_url,
                 merchant_email, shared_secret, test_mode and optionally enabled
        """

    @abstractmethod
    def get_payable(self, component, payment_area, item_id) -> dict:
        """:return: dict with amount, currency and account (the id passed to save_payment)"""

    def get_gateway_surcharge(self, gateway):
        return 0

    def get_rounded_cost(self, amount, currency, surcharge=0):
        cost = Decimal(str(amount)) * (1 + Decimal(str(surcharge)) / 100)
        return cost.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)

    @abstractmethod
    def get_success_url(self, component, payment_area, item_id) -> str:
        pass

    @abstractmethod
    def payment_exists(self, component, payment_area, item_id, user_id, gateway) -> bool:
        pass

    @abstractmethod
    def save_payment(self, account_id, component, payment_area, item_id, user_id, amount, currency, gateway):
        """:return: id of the stored payment record"""

    @abstractmethod
    def deliver_order(self, component, payment_area, item_id, payment_id, user_id):
        pass

    @abstractmethod
    def send_user_notification(self, user_id, kind, data: dict):
        pass
