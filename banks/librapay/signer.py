"""
P_SIGN computation for LibraPay.

The signed message is the concatenation, in a fixed order, of
``<byte length><value>`` for every field, with ``-`` standing in for an
empty or missing field. The digest is HMAC-SHA1 keyed with the merchant's
hexadecimal encryption key, upper-cased.
"""
import hashlib
import hmac

from banks.librapay.exceptions import ConfigurationError
from banks.librapay.models import CURRENCY

TRANSACTION_TYPE_AUTHORIZATION = '0'


def build_message(fields) -> str:
    message = ''
    for value in fields:
        if value is None or value == '':
            message += '-'
        else:
            value = str(value)
            message += f'{len(value.encode("utf-8"))}{value}'
    return message


def sign(fields, key: str) -> str:
    try:
        raw_key = bytes.fromhex(key)
    except (TypeError, ValueError):
        raise ConfigurationError('encryption key is not hexadecimal')
    message = build_message(fields).encode('utf-8')
    return hmac.new(raw_key, message, hashlib.sha1).hexdigest().upper()


def verify(fields, key: str, signature: str) -> bool:
    expected = sign(fields, key)
    return hmac.compare_digest(expected, (signature or '').upper())


def request_fields(config, amount, order_id, description, timestamp, nonce, callback_url) -> list:
    return [
        amount,
        CURRENCY,
        order_id,
        description,
        config.merchant_name,
        config.merchant_url,
        config.merchant_id,
        config.terminal_id,
        config.merchant_email,
        TRANSACTION_TYPE_AUTHORIZATION,
        None,
        None,
        timestamp,
        nonce,
        callback_url,
    ]


def response_fields(response) -> list:
    return [
        response.terminal,
        response.transaction_type,
        response.order,
        response.amount,
        response.currency,
        response.description,
        response.action,
        response.result_code,
        response.message,
        response.retrieval_ref,
        response.internal_ref,
        response.approval,
        response.timestamp,
        response.nonce,
    ]
