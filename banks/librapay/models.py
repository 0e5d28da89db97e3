from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models

CURRENCY = 'RON'

order_id_validator = RegexValidator(r'^[1-9]\d{5,18}$', 'order id must be 6-19 digits without a leading zero')


class LibraPayTransaction(models.Model):
    class StatusChoices(models.TextChoices):
        PENDING = 'pending', 'pending'
        COMPLETED = 'completed', 'completed'
        FAILED = 'failed', 'failed'

    created_at = models.DateTimeField(auto_now_add=True, verbose_name='created at')
    order_id = models.CharField(max_length=19, unique=True, validators=[order_id_validator], verbose_name='order id')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, verbose_name='user')
    component = models.CharField(max_length=100)
    payment_area = models.CharField(max_length=100)
    item_id = models.PositiveIntegerField()
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default=CURRENCY)
    status = models.CharField(choices=StatusChoices.choices, default=StatusChoices.PENDING, max_length=10)
    # 64 hex chars, echoed back only through the BACKREF url
    token = models.CharField(max_length=64, blank=True, default='')

    # last response seen from LibraPay
    action = models.CharField(max_length=4, blank=True, default='', verbose_name='ACTION')
    result_code = models.CharField(max_length=4, blank=True, default='', verbose_name='RC')
    message = models.CharField(max_length=255, blank=True, default='', verbose_name='MESSAGE')
    retrieval_ref = models.CharField(max_length=32, blank=True, default='', verbose_name='RRN')
    internal_ref = models.CharField(max_length=64, blank=True, default='', verbose_name='INT_REF')
    approval = models.CharField(max_length=32, blank=True, default='', verbose_name='APPROVAL')

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.order_id
