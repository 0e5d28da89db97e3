"""
Reconciliation of LibraPay authorization responses.

LibraPay reports the outcome of a payment twice: the browser is redirected
to the BACKREF url (``reconcile_redirect``) and the provider posts the same
fields server to server (``reconcile_notification``), in any order and any
number of times. Both paths update the one transaction row created by
``LibraPayPayment`` and may deliver the order, which must happen once.
"""
import logging
from dataclasses import dataclass

from django.utils.translation import gettext_lazy as _

from banks.librapay import signer
from banks.librapay.exceptions import AlreadyProcessed, CorrelationError, NotFoundRace, SignatureError
from banks.librapay.gateway import GATEWAY_NAME, get_gateway_configuration, get_platform
from banks.librapay.handler import LibraPayTransactionHandler
from banks.librapay.models import CURRENCY, LibraPayTransaction
from banks.librapay.notifications import build_notification_data, notify_user
from banks.librapay.response import DENIED_ACTION, DUPLICATE_ACTION, PROCESSING_ERROR_ACTION

logger = logging.getLogger(__name__)

PENDING = LibraPayTransaction.StatusChoices.PENDING
COMPLETED = LibraPayTransaction.StatusChoices.COMPLETED
FAILED = LibraPayTransaction.StatusChoices.FAILED

PAYMENT_SUCCESSFUL_MESSAGE = _('Payment was successful. Thank you for your purchase!')
PAYMENT_FAILED_MESSAGE = _('Payment failed. Please try again or contact support.')

DECLINE_MESSAGES = {
    DUPLICATE_ACTION: _('This transaction has already been submitted.'),
    DENIED_ACTION: _('Transaction was denied by the bank. Please check your card details '
                     'or try a different payment method.'),
    PROCESSING_ERROR_ACTION: _('A processing error occurred. Please try again later.'),
}


def decline_reason(response):
    if response.action in DECLINE_MESSAGES:
        return DECLINE_MESSAGES[response.action]
    return response.message or PAYMENT_FAILED_MESSAGE


@dataclass
class ReconcileResult:
    transaction: LibraPayTransaction
    approved: bool
    delivered: bool
    message: str = ''
    redirect_url: str = ''


class LibraPayReconciler:
    def __init__(self, platform=None, transaction_handler=LibraPayTransactionHandler):
        self.platform = platform
        self.transaction_handler = transaction_handler

    def get_platform(self):
        if self.platform is None:
            self.platform = get_platform()
        return self.platform

    def verify_signature(self, transaction, response):
        config = get_gateway_configuration(
            self.get_platform(), transaction.component, transaction.payment_area, transaction.item_id
        )
        if not signer.verify(signer.response_fields(response), config.shared_secret, response.signature):
            logger.critical('librapay signature mismatch for order %s', response.order)
            raise SignatureError(f'invalid P_SIGN for order {response.order}')
        return config

    def deliver_once(self, handler, transaction):
        """
        complete ``transaction`` and deliver it, unless another invocation
        already did. the status compare-and-swap and the delivery share one
        database transaction.
        """
        platform = self.get_platform()
        with handler.atomic():
            if not handler.transition_status(transaction, PENDING, COMPLETED):
                logger.info('order %s is no longer pending, skipping delivery', transaction.order_id)
                return False

            if platform.payment_exists(transaction.component, transaction.payment_area, transaction.item_id,
                                       transaction.user_id, GATEWAY_NAME):
                logger.warning('payment for order %s already recorded, skipping delivery', transaction.order_id)
                return False

            payable = platform.get_payable(transaction.component, transaction.payment_area, transaction.item_id)
            payment_id = platform.save_payment(
                payable['account'],
                transaction.component,
                transaction.payment_area,
                transaction.item_id,
                transaction.user_id,
                transaction.amount,
                CURRENCY,
                GATEWAY_NAME,
            )
            platform.deliver_order(transaction.component, transaction.payment_area, transaction.item_id,
                                   payment_id, transaction.user_id)

        logger.info('order %s delivered, payment %s', transaction.order_id, payment_id)
        return True

    def reconcile_redirect(self, response, component, payment_area, item_id, token):
        """
        the browser came back through BACKREF. only the (order, token, pending)
        triple identifies the transaction; the session is not trusted.
        """
        response.validate()
        handler = self.transaction_handler()

        transaction = handler.find_by_order_id_and_token_and_status(response.order, token, PENDING)
        if transaction is None:
            if handler.find_by_order_id_and_status(response.order, COMPLETED):
                raise AlreadyProcessed(f'order {response.order} is already completed')
            raise CorrelationError(f'no pending transaction for order {response.order} and token')

        if (transaction.component, transaction.payment_area, int(transaction.item_id)) != \
                (component, payment_area, int(item_id)):
            raise CorrelationError(f'callback parameters do not match order {response.order}')

        self.verify_signature(transaction, response)
        handler.update_transaction(transaction, response.detail_fields())

        platform = self.get_platform()
        success_url = platform.get_success_url(transaction.component, transaction.payment_area, transaction.item_id)
        data = build_notification_data(transaction, response.description, success_url)

        if response.is_approved:
            delivered = self.deliver_once(handler, transaction)
            notify_user(platform, transaction, True, data)
            return ReconcileResult(transaction, approved=True, delivered=delivered,
                                   message=PAYMENT_SUCCESSFUL_MESSAGE, redirect_url=success_url)

        handler.transition_status(transaction, PENDING, FAILED)
        logger.info('order %s declined, action %s rc %s', transaction.order_id, response.action, response.result_code)
        notify_user(platform, transaction, False, data)
        return ReconcileResult(transaction, approved=False, delivered=False, message=decline_reason(response))

    def reconcile_notification(self, response):
        """
        server to server notification. correlated by order id alone; declines
        only refresh the response fields, the redirect path settles them.
        """
        response.validate()
        handler = self.transaction_handler()

        transaction = handler.find_by_order_id(response.order)
        if transaction is None:
            logger.warning('librapay notification for unknown order %s, asking for a retry', response.order)
            raise NotFoundRace(f'order {response.order} not found')

        self.verify_signature(transaction, response)

        if transaction.action != response.action:
            handler.update_transaction(transaction, response.detail_fields())

        delivered = False
        if response.is_approved:
            delivered = self.deliver_once(handler, transaction)
        return ReconcileResult(transaction, approved=response.is_approved, delivered=delivered)
