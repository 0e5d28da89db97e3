import logging
import secrets
import time
from datetime import timezone as dt_timezone
from decimal import Decimal, ROUND_HALF_UP

from django.utils import timezone

logger = logging.getLogger(__name__)

ORDER_ID_LENGTH = 12
ORDER_ID_MAX_ATTEMPTS = 10


def random_order_id(length=ORDER_ID_LENGTH) -> str:
    first = str(secrets.randbelow(9) + 1)
    rest = ''.join(str(secrets.randbelow(10)) for _ in range(length - 1))
    return first + rest


def fallback_order_id() -> str:
    # clock based, 19 digits; only the unique constraint on order_id protects it
    order_id = str(time.time_ns())[:19]
    if order_id[0] == '0':
        order_id = '1' + order_id[1:]
    return order_id


def generate_order_id(exists, max_attempts=ORDER_ID_MAX_ATTEMPTS) -> str:
    """
    :param exists: callable taking an order id and returning True when it is already used
    """
    for _ in range(max_attempts):
        order_id = random_order_id()
        if not exists(order_id):
            return order_id

    order_id = fallback_order_id()
    logger.warning('order id generation collided %s times, falling back to %s', max_attempts, order_id)
    return order_id


def generate_nonce() -> str:
    return secrets.token_hex(16)


def generate_token() -> str:
    return secrets.token_hex(32)


def get_timestamp(now=None) -> str:
    now = now or timezone.now()
    return now.astimezone(dt_timezone.utc).strftime('%Y%m%d%H%M%S')


def format_amount(amount) -> str:
    return str(Decimal(str(amount)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))
