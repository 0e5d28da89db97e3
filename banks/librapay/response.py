from dataclasses import dataclass, fields

from banks.librapay.exceptions import ResponseValidationError
from banks.librapay.models import CURRENCY

APPROVED_ACTION = '0'
APPROVED_RESULT_CODE = '00'

DUPLICATE_ACTION = '1'
DENIED_ACTION = '2'
PROCESSING_ERROR_ACTION = '3'


@dataclass(frozen=True)
class LibraPayResponse:
    """
    authorization response as posted back by LibraPay (BACKREF or IPN).

    every attribute is a string. the dataclass defaults are the values used
    when a parameter is absent; a parameter sent empty stays empty. ACTION "0"
    means approved, so presence is checked against "" and never by truthiness.
    """
    terminal: str = ''
    transaction_type: str = '0'
    order: str = ''
    amount: str = ''
    currency: str = CURRENCY
    description: str = ''
    action: str = ''
    result_code: str = ''
    message: str = ''
    retrieval_ref: str = ''
    internal_ref: str = ''
    approval: str = ''
    timestamp: str = ''
    nonce: str = ''
    signature: str = ''

    WIRE_NAMES = {
        'terminal': 'TERMINAL',
        'transaction_type': 'TRTYPE',
        'order': 'ORDER',
        'amount': 'AMOUNT',
        'currency': 'CURRENCY',
        'description': 'DESC',
        'action': 'ACTION',
        'result_code': 'RC',
        'message': 'MESSAGE',
        'retrieval_ref': 'RRN',
        'internal_ref': 'INT_REF',
        'approval': 'APPROVAL',
        'timestamp': 'TIMESTAMP',
        'nonce': 'NONCE',
        'signature': 'P_SIGN',
    }

    REQUIRED = ('order', 'action', 'signature')

    @classmethod
    def from_params(cls, *sources):
        """
        build a response from one or more mappings (e.g. ``request.POST, request.GET``);
        the first mapping holding a parameter wins.
        """
        values = {}
        for field in fields(cls):
            name = cls.WIRE_NAMES[field.name]
            for source in sources:
                if name in source:
                    values[field.name] = str(source.get(name))
                    break
        return cls(**values)

    def validate(self):
        missing = [self.WIRE_NAMES[name] for name in self.REQUIRED if getattr(self, name) == '']
        if missing:
            raise ResponseValidationError(f'missing response fields: {", ".join(missing)}')
        return self

    @property
    def is_approved(self) -> bool:
        return self.action == APPROVED_ACTION and self.result_code == APPROVED_RESULT_CODE

    def detail_fields(self) -> dict:
        """transaction columns mirrored from this response"""
        return {
            'action': self.action,
            'result_code': self.result_code,
            'message': self.message,
            'retrieval_ref': self.retrieval_ref,
            'internal_ref': self.internal_ref,
            'approval': self.approval,
        }
