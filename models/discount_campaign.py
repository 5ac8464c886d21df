"""DiscountCampaign model."""

from datetime import datetime
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from quoteman.conf import quoteman_settings
from quoteman.pricing import DiscountRule, select_discount_rules


class DiscountType(models.TextChoices):
    PERCENTAGE = "percentage", _("Percentage")
    FIXED = "fixed", _("Fixed amount")


class AppliesTo(models.TextChoices):
    ALL = "all", _("All products")
    SPECIFIC = "specific", _("Specific products")


class DiscountCampaignQuerySet(models.QuerySet):
    def active(self, at: datetime | None = None):
        """Active campaigns whose date window contains ``at``."""
        at = at or timezone.now()
        return self.filter(is_active=True).filter(
            models.Q(starts_at__isnull=True) | models.Q(starts_at__lte=at),
            models.Q(ends_at__isnull=True) | models.Q(ends_at__gte=at),
        )

    def rules_for(self, product_id: str, at: datetime | None = None) -> list[DiscountRule]:
        """
        Discount rules applicable to ``product_id``.

        Only the highest-priority campaign applies unless
        QUOTEMAN["STACK_DISCOUNTS"] is set.
        """
        at = at or timezone.now()
        campaigns = [campaign.as_campaign() for campaign in self.active(at)]
        return select_discount_rules(campaigns, product_id, at, stack=quoteman_settings.STACK_DISCOUNTS)


class DiscountCampaign(models.Model):
    """Admin-managed discount applied when quotes are priced."""

    code = models.SlugField(_("code"), max_length=50, unique=True)
    name = models.CharField(_("name"), max_length=200)
    description = models.TextField(_("description"), blank=True)

    discount_type = models.CharField(
        _("discount type"),
        max_length=20,
        choices=DiscountType.choices,
        default=DiscountType.PERCENTAGE,
    )
    discount_value = models.DecimalField(
        _("discount value"),
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_("Percentage (0-100) or fixed amount excl. tax"),
    )

    applies_to = models.CharField(
        _("applies to"),
        max_length=20,
        choices=AppliesTo.choices,
        default=AppliesTo.ALL,
    )
    product_ids = models.JSONField(
        _("product ids"),
        default=list,
        blank=True,
        help_text=_("Configured product ids when applies to specific products"),
    )

    # Validity
    starts_at = models.DateTimeField(_("starts at"), null=True, blank=True)
    ends_at = models.DateTimeField(_("ends at"), null=True, blank=True)

    # Priority (higher = applied first)
    priority = models.IntegerField(_("priority"), default=0)
    is_active = models.BooleanField(_("active"), default=True)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    objects = DiscountCampaignQuerySet.as_manager()

    class Meta:
        verbose_name = _("discount campaign")
        verbose_name_plural = _("discount campaigns")
        ordering = ["-priority", "name"]

    def __str__(self):
        return f"{self.code} - {self.name}"

    def clean(self):
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValidationError({"discount_value": "Percentage cannot exceed 100."})
        if self.starts_at and self.ends_at and self.ends_at < self.starts_at:
            raise ValidationError({"ends_at": "End must be after start."})
        if self.applies_to == AppliesTo.SPECIFIC and not self.product_ids:
            raise ValidationError({"product_ids": "List the products this campaign applies to."})

    def as_campaign(self) -> dict:
        return {
            "id": self.code,
            "name": self.name,
            "discount_type": self.discount_type,
            "discount_value": self.discount_value,
            "applies_to": self.applies_to,
            "product_ids": list(self.product_ids or []),
            "starts_at": self.starts_at,
            "ends_at": self.ends_at,
            "is_active": self.is_active,
            "priority": self.priority,
        }
