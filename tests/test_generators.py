import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from banks.librapay import generators
from banks.librapay.generators import (
    format_amount,
    generate_nonce,
    generate_order_id,
    generate_token,
    get_timestamp,
)

ORDER_ID_PATTERN = re.compile(r'^[1-9]\d{5,18}$')


def test_order_id_shape():
    for _ in range(500):
        assert ORDER_ID_PATTERN.match(generate_order_id(lambda order_id: False))


def test_order_id_retries_on_collision():
    seen = []

    def exists(order_id):
        seen.append(order_id)
        return len(seen) < 3

    order_id = generate_order_id(exists)
    assert len(seen) == 3
    assert order_id == seen[-1]


def test_order_id_fallback_after_max_attempts(mocker, caplog):
    exists = mocker.Mock(return_value=True)
    mocker.patch.object(generators.time, 'time_ns', return_value=1769077200123456789)

    order_id = generate_order_id(exists)

    assert exists.call_count == generators.ORDER_ID_MAX_ATTEMPTS
    assert order_id == '1769077200123456789'
    assert ORDER_ID_PATTERN.match(order_id)
    assert 'falling back' in caplog.text


def test_nonce_and_token():
    nonces = {generate_nonce() for _ in range(100)}
    tokens = {generate_token() for _ in range(100)}
    assert len(nonces) == len(tokens) == 100
    assert all(re.fullmatch(r'[0-9a-f]{32}', nonce) for nonce in nonces)
    assert all(re.fullmatch(r'[0-9a-f]{64}', token) for token in tokens)


def test_timestamp_is_utc():
    bucharest = timezone(timedelta(hours=2))
    assert get_timestamp(datetime(2026, 1, 22, 12, 15, 0, tzinfo=bucharest)) == '20260122101500'


def test_timestamp_now():
    assert re.fullmatch(r'\d{14}', get_timestamp())


@pytest.mark.parametrize('amount, expected', [
    (10, '10.00'),
    (Decimal('10.5'), '10.50'),
    (12.345, '12.35'),
    ('99.999', '100.00'),
    (Decimal('0.004'), '0.00'),
])
def test_format_amount(amount, expected):
    assert format_amount(amount) == expected
