from rest_framework import serializers

NAME_PATTERN = r'^[A-Za-z0-9_-]+$'


class PurchasableSerializer(serializers.Serializer):
    component = serializers.RegexField(NAME_PATTERN, max_length=100)
    paymentarea = serializers.RegexField(NAME_PATTERN, max_length=100)
    itemid = serializers.IntegerField(min_value=0)


class PayRequestSerializer(PurchasableSerializer):
    description = serializers.CharField(required=False, allow_blank=True, default='', max_length=1000)


class CallbackQuerySerializer(PurchasableSerializer):
    token = serializers.RegexField(r'^[A-Za-z0-9]+$', max_length=64)
