import logging

from decouple import config
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import HttpResponse
from django.shortcuts import redirect
from django.utils.html import format_html, format_html_join
from django.utils.translation import gettext as _
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from banks.librapay.exceptions import AlreadyProcessed, ConfigurationError, LibraPayError, ResponseValidationError
from banks.librapay.gateway import get_platform
from banks.librapay.handler import LibraPayPayment
from banks.librapay.reconciler import PAYMENT_FAILED_MESSAGE, LibraPayReconciler
from banks.librapay.response import LibraPayResponse
from banks.librapay.serializers import CallbackQuerySerializer, PayRequestSerializer

logger = logging.getLogger(__name__)

# LibraPay keeps posting the notification until the body is exactly this
IPN_ACKNOWLEDGEMENT = '1'

REDIRECT_FORM = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{title}</title>
</head>
<body>
    <p>{intro}</p>
    <form id="librapay_form" method="post" action="{url}">
        {inputs}
        <noscript>
            <p>{noscript}</p>
            <input type="submit" value="{submit}">
        </noscript>
    </form>
    <script>
        document.getElementById('librapay_form').submit();
    </script>
</body>
</html>
"""


def get_failure_url():
    return config('LIBRAPAY_FAILURE_URL', default='/')


def render_redirect_form(url, fields):
    inputs = format_html_join('\n        ', '<input type="hidden" name="{}" value="{}">', fields.items())
    return format_html(
        REDIRECT_FORM,
        title=_('Redirecting to payment...'),
        intro=_('You are being redirected to LibraPay to complete your payment. Please wait...'),
        url=url,
        inputs=inputs,
        noscript=_('JavaScript is required to continue. Please click the button below to proceed to payment.'),
        submit=_('Continue to payment'),
    )


def redirect_with_message(request, url, message, level=messages.ERROR):
    # the return from LibraPay is cross-site, a session may not exist yet
    messages.add_message(request, level, message, fail_silently=True)
    return redirect(url)


def prepare_payment(request, data):
    return LibraPayPayment(
        request=request,
        component=data['component'],
        payment_area=data['paymentarea'],
        item_id=data['itemid'],
        description=data['description'],
        platform=get_platform(),
    )


@login_required
@require_GET
def pay(request):
    serializer = PayRequestSerializer(data=request.GET)
    if not serializer.is_valid():
        return HttpResponse(_('Invalid payment request.'), status=400)

    try:
        payment = prepare_payment(request, serializer.validated_data)
        url, fields = payment.prepare_gateway()
    except LibraPayError as e:
        logger.error('librapay payment could not be prepared: %s', e)
        return HttpResponse(str(e.user_message), status=503)

    return HttpResponse(render_redirect_form(url, fields))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def gateway_form(request):
    """
    JSON flavour of ``pay`` for clients that build the form themselves:
    {
        'url': gateway_url,
        'method': 'post',
        'fields': {...}
    }
    """
    serializer = PayRequestSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    try:
        payment = prepare_payment(request, serializer.validated_data)
    except ConfigurationError as e:
        logger.error('librapay platform unavailable: %s', e)
        return Response({'error': str(e.user_message)}, status=503)
    return payment.get_gateway_form_response()


# LibraPay redirects the browser here (BACKREF) with GET or POST
@csrf_exempt
@require_http_methods(['GET', 'POST'])
def process(request):
    failure_url = get_failure_url()

    query = CallbackQuerySerializer(data=request.GET)
    if not query.is_valid():
        logger.warning('librapay callback with invalid parameters: %s', query.errors)
        return redirect_with_message(request, failure_url, ResponseValidationError.user_message)
    params = query.validated_data

    response = LibraPayResponse.from_params(request.POST, request.GET)
    try:
        reconciler = LibraPayReconciler(platform=get_platform())
        result = reconciler.reconcile_redirect(
            response,
            component=params['component'],
            payment_area=params['paymentarea'],
            item_id=params['itemid'],
            token=params['token'],
        )
    except AlreadyProcessed as e:
        logger.info('librapay callback for processed order: %s', e)
        return redirect_with_message(request, failure_url, e.user_message, messages.WARNING)
    except LibraPayError as e:
        logger.warning('librapay callback rejected: %s', e)
        return redirect_with_message(request, failure_url, e.user_message)
    except Exception:
        logger.exception('librapay callback for order %s failed', response.order)
        return redirect_with_message(request, failure_url, PAYMENT_FAILED_MESSAGE)

    if result.approved:
        return redirect_with_message(request, result.redirect_url, result.message, messages.SUCCESS)
    return redirect_with_message(request, failure_url, result.message)


# server to server notification, no session and no token
@csrf_exempt
@require_POST
def ipn(request):
    response = LibraPayResponse.from_params(request.POST)
    try:
        reconciler = LibraPayReconciler(platform=get_platform())
        reconciler.reconcile_notification(response)
    except ConfigurationError as e:
        logger.error('librapay notification for order %s failed: %s', response.order, e)
        return HttpResponse(status=500)
    except LibraPayError as e:
        # anything but the acknowledgement makes LibraPay retry
        logger.warning('librapay notification for order %s not acknowledged: %s', response.order, e)
        return HttpResponse(status=400)

    return HttpResponse(IPN_ACKNOWLEDGEMENT)
