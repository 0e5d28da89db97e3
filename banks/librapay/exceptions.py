from django.utils.translation import gettext_lazy as _


class LibraPayError(Exception):
    """base class; ``user_message`` is the only text that may reach the end user"""
    user_message = _('Invalid response received from payment gateway.')

    def __init__(self, detail='', user_message=None):
        super().__init__(detail)
        if user_message is not None:
            self.user_message = user_message


class ConfigurationError(LibraPayError):
    user_message = _('The payment gateway is not available for this item.')


class ResponseValidationError(LibraPayError):
    user_message = _('Invalid response received from payment gateway.')


class SignatureError(LibraPayError):
    user_message = _('Payment verification failed. The response signature is invalid.')


class CorrelationError(LibraPayError):
    user_message = _('Session verification failed. Please try the payment again.')


class NotFoundRace(LibraPayError):
    """the notification arrived before its transaction is visible; the provider should retry"""


class AlreadyProcessed(LibraPayError):
    user_message = _('This transaction has already been processed.')
