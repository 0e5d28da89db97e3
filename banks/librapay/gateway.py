import re
from dataclasses import dataclass

from decouple import config
from django.utils.module_loading import import_string

from banks.librapay.exceptions import ConfigurationError
from banks.librapay.models import CURRENCY

GATEWAY_NAME = 'librapay'

URL_TEST = 'https://merchant.librapay.ro/pay_auth.php'
URL_LIVE = 'https://secure.librapay.ro/pay_auth.php'

SUPPORTED_CURRENCIES = (CURRENCY,)

TERMINAL_PATTERN = re.compile(r'^\d{8}$')
MERCHANT_PATTERN = re.compile(r'^\d{15}$')
KEY_PATTERN = re.compile(r'^[a-fA-F0-9]{32}$')

REQUIRED_SETTINGS = (
    'terminal_id', 'merchant_id', 'merchant_name', 'merchant_url', 'merchant_email', 'shared_secret'
)


def _as_bool(value):
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


@dataclass(frozen=True)
class GatewayConfiguration:
    terminal_id: str
    merchant_id: str
    merchant_name: str
    merchant_url: str
    merchant_email: str
    shared_secret: str
    test_mode: bool = True

    @classmethod
    def from_dict(cls, data):
        if not data or not data.get('enabled', True):
            raise ConfigurationError('librapay is disabled for this item')

        missing = [name for name in REQUIRED_SETTINGS if not data.get(name)]
        if missing:
            raise ConfigurationError(f'missing gateway settings: {", ".join(missing)}')

        configuration = cls(
            terminal_id=str(data['terminal_id']),
            merchant_id=str(data['merchant_id']),
            merchant_name=str(data['merchant_name']),
            merchant_url=str(data['merchant_url']),
            merchant_email=str(data['merchant_email']),
            shared_secret=str(data['shared_secret']),
            test_mode=_as_bool(data.get('test_mode', True)),
        )
        configuration.validate()
        return configuration

    def validate(self):
        if not TERMINAL_PATTERN.match(self.terminal_id):
            raise ConfigurationError('terminal id must be exactly 8 digits')
        if not MERCHANT_PATTERN.match(self.merchant_id):
            raise ConfigurationError('merchant id must be exactly 15 digits')
        if not KEY_PATTERN.match(self.shared_secret):
            raise ConfigurationError('encryption key must be exactly 32 hexadecimal characters')

    @property
    def url(self):
        return URL_TEST if self.test_mode else URL_LIVE


def get_platform():
    """instantiate the PaymentPlatform named by the LIBRAPAY_PLATFORM setting"""
    path = config('LIBRAPAY_PLATFORM', default='')
    if not path:
        raise ConfigurationError('LIBRAPAY_PLATFORM is not set')
    try:
        platform_class = import_string(path)
    except ImportError as e:
        raise ConfigurationError(f'cannot import LIBRAPAY_PLATFORM {path!r}') from e
    return platform_class()


def get_gateway_configuration(platform, component, payment_area, item_id):
    try:
        data = platform.get_gateway_configuration(component, payment_area, item_id, GATEWAY_NAME)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f'gateway configuration lookup failed: {e}') from e
    return GatewayConfiguration.from_dict(data)
