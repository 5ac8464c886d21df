"""ConfiguredProduct, WizardStep and StepOption models."""

import uuid as uuid_lib
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords

from quoteman.configuration import Option, ProductConfiguration, Step


class ConfiguredProduct(models.Model):
    """Base product sold through the configurator wizard."""

    uuid = models.UUIDField(default=uuid_lib.uuid4, editable=False, unique=True, verbose_name=_("UUID"))

    product_id = models.SlugField(_("product id"), max_length=100, unique=True)
    name = models.CharField(_("name"), max_length=200)
    currency = models.CharField(
        _("currency"),
        max_length=3,
        default="GBP",
        help_text=_("ISO-4217 code used for option price overrides"),
    )
    is_active = models.BooleanField(_("active"), default=True)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    history = HistoricalRecords()

    class Meta:
        verbose_name = _("configured product")
        verbose_name_plural = _("configured products")
        ordering = ["name"]

    def __str__(self):
        return f"{self.product_id} - {self.name}"

    def to_configuration(self) -> ProductConfiguration:
        """Build the immutable configuration, steps and options in wizard order."""
        steps = []
        for step in self.steps.prefetch_related("options").order_by("position", "id"):
            steps.append(
                Step(
                    id=step.step_id,
                    name=step.name,
                    description=step.description,
                    required=step.required,
                    allow_multiple=step.allow_multiple,
                    options=tuple(
                        opt.to_option()
                        for opt in sorted(step.options.all(), key=lambda o: (o.position, o.pk))
                    ),
                )
            )
        return ProductConfiguration(
            product_id=self.product_id,
            name=self.name,
            currency=self.currency,
            steps=tuple(steps),
        )


class WizardStep(models.Model):
    """One stage of the configurator wizard."""

    product = models.ForeignKey(
        ConfiguredProduct,
        on_delete=models.CASCADE,
        related_name="steps",
        verbose_name=_("product"),
    )
    step_id = models.SlugField(_("step id"), max_length=100)
    name = models.CharField(_("name"), max_length=200)
    description = models.TextField(_("description"), blank=True)
    required = models.BooleanField(_("required"), default=False)
    allow_multiple = models.BooleanField(
        _("allow multiple"),
        default=False,
        help_text=_("Multi-select step (e.g. accessories)"),
    )
    position = models.PositiveIntegerField(_("position"), default=0)

    class Meta:
        verbose_name = _("wizard step")
        verbose_name_plural = _("wizard steps")
        ordering = ["product", "position", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "step_id"],
                name="unique_product_step_id",
            ),
        ]

    def __str__(self):
        return f"{self.product.product_id}/{self.step_id}"


class StepOption(models.Model):
    """Selectable option within a wizard step."""

    step = models.ForeignKey(
        WizardStep,
        on_delete=models.CASCADE,
        related_name="options",
        verbose_name=_("step"),
    )
    option_id = models.SlugField(_("option id"), max_length=100)
    label = models.CharField(_("label"), max_length=200)
    description = models.TextField(_("description"), blank=True)

    # Price source: override wins over the catalog item
    catalog_item_id = models.PositiveBigIntegerField(
        _("catalog item id"),
        null=True,
        blank=True,
        help_text=_("Id of the linked product in the external catalog"),
    )
    price_override_excl_tax = models.DecimalField(
        _("price override (excl. tax)"),
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
    )
    tax_rate_percent = models.DecimalField(
        _("tax rate (%)"),
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_("Empty = use the catalog item's rate"),
    )
    quantity = models.DecimalField(
        _("quantity"),
        max_digits=10,
        decimal_places=3,
        default=Decimal("1"),
        validators=[MinValueValidator(Decimal("0.001"))],
    )
    is_default = models.BooleanField(_("default"), default=False)
    position = models.PositiveIntegerField(_("position"), default=0)

    # History tracking (price override audit)
    history = HistoricalRecords()

    class Meta:
        verbose_name = _("step option")
        verbose_name_plural = _("step options")
        ordering = ["step", "position", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["step", "option_id"],
                name="unique_step_option_id",
            ),
        ]

    def __str__(self):
        return f"{self.step.step_id}/{self.option_id}"

    def to_option(self) -> Option:
        return Option(
            id=self.option_id,
            label=self.label,
            description=self.description,
            catalog_item_id=self.catalog_item_id,
            price_override_excl_tax=self.price_override_excl_tax,
            tax_rate_percent=self.tax_rate_percent,
            quantity=self.quantity,
            is_default=self.is_default,
        )
