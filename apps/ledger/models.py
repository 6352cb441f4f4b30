from decimal import Decimal

from django.db import models

ZERO = Decimal("0.00")


class LedgerPostedModel(models.Model):
    """
    Bookkeeping columns for a record whose money effect is posted to a parent aggregate.

    posted_amount is what was actually applied to the parent, which can differ from the
    record's nominal amount once underflow clamping kicks in. Reversal always uses it.
    """

    ledger_posted = models.BooleanField(default=False, editable=False)
    posted_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO, editable=False)

    class Meta:
        abstract = True
