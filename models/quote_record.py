"""QuoteRecord model."""

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords

from quoteman.quotes import Quote, QuoteStatus, quote_from_dict, quote_to_dict


class QuoteRecord(models.Model):
    """
    Persisted Quote.

    ``payload`` holds the full quote JSON (see quotes.quote_to_dict).
    The other columns are denormalized for admin lists and lookups.
    """

    quote_id = models.CharField(_("quote id"), max_length=64, unique=True)
    product_id = models.CharField(_("product id"), max_length=100, db_index=True)
    status = models.CharField(
        _("status"),
        max_length=20,
        choices=[(s.value, s.value.title()) for s in QuoteStatus],
        default=QuoteStatus.DRAFT.value,
        db_index=True,
    )
    customer_email = models.EmailField(_("customer email"), blank=True)
    currency = models.CharField(_("currency"), max_length=3)
    total_incl_tax = models.DecimalField(_("total (incl. tax)"), max_digits=14, decimal_places=2)

    created_at = models.DateTimeField(_("created at"))
    valid_until = models.DateTimeField(_("valid until"))
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    payload = models.JSONField(_("payload"), encoder=DjangoJSONEncoder)

    # History tracking (status changes audit)
    history = HistoricalRecords()

    class Meta:
        verbose_name = _("quote")
        verbose_name_plural = _("quotes")
        ordering = ["-created_at"]

    def __str__(self):
        return self.quote_id

    @classmethod
    def fields_from_quote(cls, quote: Quote) -> dict:
        payload = quote_to_dict(quote)
        return {
            "product_id": quote.product_id,
            "status": quote.status.value,
            "customer_email": quote.customer.email if quote.customer else "",
            "currency": quote.currency,
            "total_incl_tax": quote.total_incl_tax,
            "created_at": quote.created_at,
            "valid_until": quote.valid_until,
            "payload": payload,
        }

    def to_quote(self) -> Quote:
        data = dict(self.payload)
        # The column is authoritative for status.
        data["status"] = self.status
        return quote_from_dict(data)
