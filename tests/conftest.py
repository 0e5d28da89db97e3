"""
Pytest fixtures for the LibraPay app.
"""
from decimal import Decimal

import pytest
from django.test import RequestFactory

from banks.librapay.handler import LibraPayTransactionHandler
from banks.librapay.models import LibraPayTransaction
from tests.fakes import InMemoryPlatform, InMemoryTransactionHandler

TOKEN = 'a' * 64


@pytest.fixture
def platform():
    return InMemoryPlatform()


@pytest.fixture
def memory_handler():
    return InMemoryTransactionHandler()


@pytest.fixture
def user(django_user_model):
    return django_user_model.objects.create_user(
        username='student', email='student@example.com', password='secret', first_name='Ana', last_name='Pop'
    )


@pytest.fixture
def pending_transaction(user):
    return LibraPayTransactionHandler().create_transaction(
        order_id='123456789012',
        user=user,
        component='enrol_fee',
        payment_area='fee',
        item_id=42,
        amount=Decimal('10.00'),
        currency='RON',
        status=LibraPayTransaction.StatusChoices.PENDING,
        token=TOKEN,
    )


@pytest.fixture
def rf_request(rf: RequestFactory, user):
    request = rf.get('/payment/gateway/librapay/pay/')
    request.user = user
    return request


@pytest.fixture
def use_platform(monkeypatch, platform):
    """make the views resolve the in-memory platform"""
    monkeypatch.setattr('banks.librapay.views.get_platform', lambda: platform)
    return platform
