from django.db import transaction

from apps.ledger.services import LedgerService

from .models import Payment


def create_payment(**data) -> Payment:
    """Store a payment and credit the project and owner in one transaction."""
    with transaction.atomic():
        payment = Payment.objects.create(**data)
        LedgerService.post_payment_create(payment)
    return payment
