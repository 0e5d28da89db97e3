import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='LibraPayTransaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('order_id', models.CharField(max_length=19, unique=True, validators=[
                    django.core.validators.RegexValidator(
                        '^[1-9]\\d{5,18}$', 'order id must be 6-19 digits without a leading zero')
                ], verbose_name='order id')),
                ('component', models.CharField(max_length=100)),
                ('payment_area', models.CharField(max_length=100)),
                ('item_id', models.PositiveIntegerField()),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('currency', models.CharField(default='RON', max_length=3)),
                ('status', models.CharField(choices=[
                    ('pending', 'pending'), ('completed', 'completed'), ('failed', 'failed')
                ], default='pending', max_length=10)),
                ('token', models.CharField(blank=True, default='', max_length=64)),
                ('action', models.CharField(blank=True, default='', max_length=4, verbose_name='ACTION')),
                ('result_code', models.CharField(blank=True, default='', max_length=4, verbose_name='RC')),
                ('message', models.CharField(blank=True, default='', max_length=255, verbose_name='MESSAGE')),
                ('retrieval_ref', models.CharField(blank=True, default='', max_length=32, verbose_name='RRN')),
                ('internal_ref', models.CharField(blank=True, default='', max_length=64, verbose_name='INT_REF')),
                ('approval', models.CharField(blank=True, default='', max_length=32, verbose_name='APPROVAL')),
                ('user', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL,
                                           to=settings.AUTH_USER_MODEL, verbose_name='user')),
            ],
            options={'ordering': ['-created_at']},
        ),
    ]
