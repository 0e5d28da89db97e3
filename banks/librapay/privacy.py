"""
Personal data held by the LibraPay app and the hooks a data-subject-rights
process calls to export or erase it.
"""
from banks.librapay.models import LibraPayTransaction
from banks.librapay.response import APPROVED_ACTION

METADATA = {
    'table': LibraPayTransaction._meta.db_table,
    'description': 'Stores LibraPay payment transaction data.',
    'fields': {
        'user': 'The ID of the user who made the payment.',
        'order_id': 'The unique order ID for the transaction.',
        'amount': 'The payment amount.',
        'created_at': 'The time the transaction was created.',
    },
}


def get_users_with_data():
    return set(
        LibraPayTransaction.objects.filter(user__isnull=False).values_list('user_id', flat=True).distinct()
    )


def export_user_data(user_id) -> list:
    return [
        {
            'orderid': transaction.order_id,
            'amount': str(transaction.amount),
            'currency': transaction.currency,
            'status': 'approved' if transaction.action == APPROVED_ACTION else 'failed',
            'timecreated': transaction.created_at.isoformat(),
        }
        for transaction in LibraPayTransaction.objects.filter(user_id=user_id).order_by('created_at', 'id')
    ]


def delete_data_for_user(user_id) -> int:
    deleted, _ = LibraPayTransaction.objects.filter(user_id=user_id).delete()
    return deleted


def delete_data_for_users(user_ids) -> int:
    if not user_ids:
        return 0
    deleted, _ = LibraPayTransaction.objects.filter(user_id__in=list(user_ids)).delete()
    return deleted


def delete_all_data() -> int:
    deleted, _ = LibraPayTransaction.objects.all().delete()
    return deleted
