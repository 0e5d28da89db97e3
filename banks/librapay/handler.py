import base64
import json
import logging
from urllib.parse import urlencode

from django.db import transaction as db_transaction
from django.urls import reverse
from rest_framework.response import Response

from banks.librapay.exceptions import ConfigurationError, LibraPayError
from banks.librapay.gateway import GATEWAY_NAME, SUPPORTED_CURRENCIES, get_gateway_configuration, get_platform
from banks.librapay.generators import (
    format_amount,
    generate_nonce,
    generate_order_id,
    generate_token,
    get_timestamp,
)
from banks.librapay.models import CURRENCY, LibraPayTransaction
from banks.librapay.signer import request_fields, sign
from utils.interfaces import TransactionHandler

logger = logging.getLogger(__name__)

DESCRIPTION_MAX_LENGTH = 50
DEFAULT_PHONE = '0000000000'
DEFAULT_COUNTRY = 'RO'
NOT_AVAILABLE = 'N/A'


class LibraPayTransactionHandler(TransactionHandler):
    def create_transaction(self, **fields):
        return LibraPayTransaction.objects.create(**fields)

    def update_transaction(self, transaction: LibraPayTransaction, update_fields: dict):
        LibraPayTransaction.objects.filter(id=transaction.id).update(**update_fields)
        for name, value in update_fields.items():
            setattr(transaction, name, value)
        return transaction

    def find_transaction(self, **lookup):
        return LibraPayTransaction.objects.filter(**lookup).first()

    def transaction_exists(self, **lookup):
        return LibraPayTransaction.objects.filter(**lookup).exists()

    def transition_status(self, transaction: LibraPayTransaction, from_status, to_status):
        updated = LibraPayTransaction.objects.filter(id=transaction.id, status=from_status).update(status=to_status)
        if updated:
            transaction.status = to_status
        return bool(updated)

    def atomic(self):
        return db_transaction.atomic()


def _user_value(user, names, default):
    for name in names:
        value = getattr(user, name, '')
        if value:
            return value
    return default


def build_data_custom(description, amount, user) -> str:
    """
    DATA_CUSTOM payload: product and buyer details, JSON then base64
    """
    item = description[:DESCRIPTION_MAX_LENGTH]
    email = getattr(user, 'email', '')
    name = user.get_full_name() if hasattr(user, 'get_full_name') else str(user)
    name = name or getattr(user, 'username', '')
    phone = _user_value(user, ('phone1', 'phone2', 'phone'), DEFAULT_PHONE)
    city = _user_value(user, ('city',), NOT_AVAILABLE)
    country = _user_value(user, ('country',), DEFAULT_COUNTRY)
    address = _user_value(user, ('address',), NOT_AVAILABLE)

    data = {
        'ProductsData': [
            {
                'ItemName': item,
                'ItemDesc': item,
                'Quantity': 1,
                'Price': format_amount(amount),
            },
        ],
        'UserData': {
            'Email': email,
            'Name': name,
            'Phone': phone,
            'BillingEmail': email,
            'BillingName': name,
            'BillingPhone': phone,
            'BillingCity': city,
            'BillingCountry': country,
            'ShippingEmail': email,
            'ShippingName': name,
            'ShippingAddress': address,
            'ShippingPhone': phone,
            'ShippingCity': city,
            'ShippingCountry': country,
        },
    }
    return base64.b64encode(json.dumps(data).encode('utf-8')).decode('ascii')


class LibraPayPayment:
    def __init__(self,
                 request,
                 component,
                 payment_area,
                 item_id,
                 description='',
                 platform=None,
                 reverse_callback_url='librapay:process',
                 transaction_handler=LibraPayTransactionHandler):

        self.request = request
        self.component = component
        self.payment_area = payment_area
        self.item_id = item_id
        self.description = description or ''
        self.platform = platform
        self.reverse_callback_url = reverse_callback_url
        self.transaction_handler = transaction_handler

    def get_platform(self):
        if self.platform is None:
            self.platform = get_platform()
        return self.platform

    def create_transaction(self, order_id, token, amount, user=None):
        handler = self.transaction_handler()
        with handler.atomic():
            return handler.create_transaction(
                order_id=order_id,
                user=self.request.user if not user else user,
                component=self.component,
                payment_area=self.payment_area,
                item_id=self.item_id,
                amount=amount,
                currency=CURRENCY,
                status=LibraPayTransaction.StatusChoices.PENDING,
                token=token,
            )

    def build_callback_url(self, token):
        query = urlencode({
            'component': self.component,
            'paymentarea': self.payment_area,
            'itemid': self.item_id,
            'token': token,
        })
        return self.request.build_absolute_uri(reverse(self.reverse_callback_url) + '?' + query)

    def get_cost(self):
        platform = self.get_platform()
        payable = platform.get_payable(self.component, self.payment_area, self.item_id)
        if payable['currency'] not in SUPPORTED_CURRENCIES:
            raise ConfigurationError(f'unsupported currency {payable["currency"]}')
        surcharge = platform.get_gateway_surcharge(GATEWAY_NAME)
        return platform.get_rounded_cost(payable['amount'], payable['currency'], surcharge)

    def prepare_gateway(self):
        """
        create the pending transaction and return ``(url, fields)`` for the
        form the browser posts to LibraPay. nothing is stored when this raises.
        """
        config = get_gateway_configuration(self.get_platform(), self.component, self.payment_area, self.item_id)
        cost = self.get_cost()

        handler = self.transaction_handler()
        order_id = generate_order_id(handler.exists_by_order_id)
        nonce = generate_nonce()
        token = generate_token()
        timestamp = get_timestamp()
        amount = format_amount(cost)

        callback_url = self.build_callback_url(token)
        description = self.description[:DESCRIPTION_MAX_LENGTH]
        data_custom = build_data_custom(self.description, cost, self.request.user)

        signature = sign(
            request_fields(config, amount, order_id, description, timestamp, nonce, callback_url),
            config.shared_secret,
        )

        self.create_transaction(order_id=order_id, token=token, amount=cost)
        logger.info('librapay transaction %s created for %s/%s/%s',
                    order_id, self.component, self.payment_area, self.item_id)

        fields = {
            'AMOUNT': amount,
            'CURRENCY': CURRENCY,
            'ORDER': order_id,
            'DESC': description,
            'TERMINAL': config.terminal_id,
            'TIMESTAMP': timestamp,
            'NONCE': nonce,
            'BACKREF': callback_url,
            'DATA_CUSTOM': data_custom,
            'P_SIGN': signature,
        }
        return config.url, fields

    def get_gateway_form_response(self):
        try:
            url, fields = self.prepare_gateway()
        except LibraPayError as e:
            logger.error('librapay gateway preparation failed: %s', e)
            return Response({'error': str(e.user_message)}, status=503)
        return Response({'url': url, 'method': 'post', 'fields': fields}, status=200)
