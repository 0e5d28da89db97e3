import logging

from django.utils.translation import gettext as _

from banks.librapay.generators import format_amount
from banks.librapay.models import CURRENCY

logger = logging.getLogger(__name__)

PAYMENT_SUCCESSFUL = 'payment_successful'
PAYMENT_FAILED = 'payment_failed'


def build_notification_data(transaction, description, url) -> dict:
    return {
        'amount': format_amount(transaction.amount),
        'currency': CURRENCY,
        'description': description,
        'orderid': transaction.order_id,
        'url': url,
    }


def notify_user(platform, transaction, approved, data):
    if approved:
        kind = PAYMENT_SUCCESSFUL
        subject = _('Payment successful - Receipt')
        message = _('Your payment of %(amount)s %(currency)s for "%(description)s" was successful. '
                    'Order ID: %(orderid)s. You can now access your purchase at %(url)s') % data
    else:
        kind = PAYMENT_FAILED
        subject = _('Payment failed')
        message = _('Your payment of %(amount)s %(currency)s for "%(description)s" failed. '
                    'Please try again or contact support.') % data

    # the payment outcome is already stored, a lost notification must not undo it
    try:
        platform.send_user_notification(transaction.user_id, kind, {**data, 'subject': subject, 'message': message})
    except Exception:
        logger.exception('could not send %s notification for order %s', kind, transaction.order_id)
        return False
    return True
