"""CatalogEntry model."""

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords
from taggit.managers import TaggableManager

from quoteman.protocols.catalog import CatalogItem


class CatalogEntryQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def search(self, term: str):
        """Match name, code or keyword (case-insensitive)."""
        return self.filter(
            models.Q(name__icontains=term)
            | models.Q(code__icontains=term)
            | models.Q(keywords__name__iexact=term)
        ).distinct()


class CatalogEntry(models.Model):
    """
    Locally managed catalog item.

    Backs LocalCatalogBackend for shops that keep prices in the admin
    instead of an external CRM catalog.
    """

    name = models.CharField(_("name"), max_length=200)
    code = models.CharField(_("code"), max_length=100, blank=True, db_index=True)
    unit_price_excl_tax = models.DecimalField(
        _("unit price (excl. tax)"),
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    currency = models.CharField(_("currency"), max_length=3, default="GBP")
    tax_rate_percent = models.DecimalField(
        _("tax rate (%)"),
        max_digits=5,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
    )

    keywords = TaggableManager(
        blank=True,
        verbose_name=_("keywords"),
        help_text=_("Search tags. Comma separated."),
    )

    is_active = models.BooleanField(_("active"), default=True)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    # History tracking (catalog price audit)
    history = HistoricalRecords()

    objects = CatalogEntryQuerySet.as_manager()

    class Meta:
        verbose_name = _("catalog entry")
        verbose_name_plural = _("catalog entries")
        ordering = ["name"]

    def __str__(self):
        return f"#{self.pk} {self.name}"

    def to_catalog_item(self) -> CatalogItem:
        return CatalogItem(
            id=self.pk,
            name=self.name,
            unit_price_excl_tax=self.unit_price_excl_tax,
            currency=self.currency.upper(),
            tax_rate_percent=self.tax_rate_percent,
        )
