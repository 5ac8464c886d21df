import decimal
import uuid

import django.core.serializers.json
import django.core.validators
import django.db.models.deletion
import simple_history.models
import taggit.managers
from django.conf import settings
from django.db import migrations, models


HISTORY_OPTIONS = {
    "ordering": ("-history_date", "-history_id"),
    "get_latest_by": ("history_date", "history_id"),
}


def history_fields():
    return [
        ("history_id", models.AutoField(primary_key=True, serialize=False)),
        ("history_date", models.DateTimeField(db_index=True)),
        ("history_change_reason", models.CharField(max_length=100, null=True)),
        (
            "history_type",
            models.CharField(
                choices=[("+", "Created"), ("~", "Changed"), ("-", "Deleted")],
                max_length=1,
            ),
        ),
        (
            "history_user",
            models.ForeignKey(
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
    ]


def configured_product_fields(historical=False):
    return [
        (
            "uuid",
            models.UUIDField(
                db_index=historical,
                default=uuid.uuid4,
                editable=False,
                unique=not historical,
                verbose_name="UUID",
            ),
        ),
        (
            "product_id",
            models.SlugField(max_length=100, unique=not historical, verbose_name="product id"),
        ),
        ("name", models.CharField(max_length=200, verbose_name="name")),
        (
            "currency",
            models.CharField(
                default="GBP",
                help_text="ISO-4217 code used for option price overrides",
                max_length=3,
                verbose_name="currency",
            ),
        ),
        ("is_active", models.BooleanField(default=True, verbose_name="active")),
    ]


def step_option_fields():
    return [
        ("option_id", models.SlugField(max_length=100, verbose_name="option id")),
        ("label", models.CharField(max_length=200, verbose_name="label")),
        ("description", models.TextField(blank=True, verbose_name="description")),
        (
            "catalog_item_id",
            models.PositiveBigIntegerField(
                blank=True,
                help_text="Id of the linked product in the external catalog",
                null=True,
                verbose_name="catalog item id",
            ),
        ),
        (
            "price_override_excl_tax",
            models.DecimalField(
                blank=True,
                decimal_places=2,
                max_digits=12,
                null=True,
                validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                verbose_name="price override (excl. tax)",
            ),
        ),
        (
            "tax_rate_percent",
            models.DecimalField(
                blank=True,
                decimal_places=2,
                help_text="Empty = use the catalog item's rate",
                max_digits=5,
                null=True,
                validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                verbose_name="tax rate (%)",
            ),
        ),
        (
            "quantity",
            models.DecimalField(
                decimal_places=3,
                default=decimal.Decimal("1"),
                max_digits=10,
                validators=[django.core.validators.MinValueValidator(decimal.Decimal("0.001"))],
                verbose_name="quantity",
            ),
        ),
        ("is_default", models.BooleanField(default=False, verbose_name="default")),
        ("position", models.PositiveIntegerField(default=0, verbose_name="position")),
    ]


def catalog_entry_fields():
    return [
        ("name", models.CharField(max_length=200, verbose_name="name")),
        ("code", models.CharField(blank=True, db_index=True, max_length=100, verbose_name="code")),
        (
            "unit_price_excl_tax",
            models.DecimalField(
                decimal_places=2,
                max_digits=12,
                validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                verbose_name="unit price (excl. tax)",
            ),
        ),
        ("currency", models.CharField(default="GBP", max_length=3, verbose_name="currency")),
        (
            "tax_rate_percent",
            models.DecimalField(
                decimal_places=2,
                default=decimal.Decimal("0"),
                max_digits=5,
                validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                verbose_name="tax rate (%)",
            ),
        ),
        ("is_active", models.BooleanField(default=True, verbose_name="active")),
    ]


QUOTE_STATUS_CHOICES = [
    ("draft", "Draft"),
    ("sent", "Sent"),
    ("accepted", "Accepted"),
    ("expired", "Expired"),
]


def quote_record_fields(historical=False):
    return [
        (
            "quote_id",
            models.CharField(
                db_index=historical,
                max_length=64,
                unique=not historical,
                verbose_name="quote id",
            ),
        ),
        ("product_id", models.CharField(db_index=True, max_length=100, verbose_name="product id")),
        (
            "status",
            models.CharField(
                choices=QUOTE_STATUS_CHOICES,
                db_index=True,
                default="draft",
                max_length=20,
                verbose_name="status",
            ),
        ),
        ("customer_email", models.EmailField(blank=True, max_length=254, verbose_name="customer email")),
        ("currency", models.CharField(max_length=3, verbose_name="currency")),
        (
            "total_incl_tax",
            models.DecimalField(decimal_places=2, max_digits=14, verbose_name="total (incl. tax)"),
        ),
        ("created_at", models.DateTimeField(verbose_name="created at")),
        ("valid_until", models.DateTimeField(verbose_name="valid until")),
    ]


def quote_payload_field():
    return (
        "payload",
        models.JSONField(
            encoder=django.core.serializers.json.DjangoJSONEncoder,
            verbose_name="payload",
        ),
    )


def pk_field():
    return (
        "id",
        models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID"),
    )


def historical_pk_field():
    return (
        "id",
        models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name="ID"),
    )


def timestamps(historical=False):
    if historical:
        return [
            ("created_at", models.DateTimeField(blank=True, editable=False, verbose_name="created at")),
            ("updated_at", models.DateTimeField(blank=True, editable=False, verbose_name="updated at")),
        ]
    return [
        ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
        ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
    ]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("taggit", "0001_initial"),
    ]

    operations = [
        # ConfiguredProduct
        migrations.CreateModel(
            name="ConfiguredProduct",
            fields=[pk_field(), *configured_product_fields(), *timestamps()],
            options={
                "verbose_name": "configured product",
                "verbose_name_plural": "configured products",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="HistoricalConfiguredProduct",
            fields=[
                historical_pk_field(),
                *configured_product_fields(historical=True),
                *timestamps(historical=True),
                *history_fields(),
            ],
            options={
                "verbose_name": "historical configured product",
                "verbose_name_plural": "historical configured products",
                **HISTORY_OPTIONS,
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        # WizardStep
        migrations.CreateModel(
            name="WizardStep",
            fields=[
                pk_field(),
                ("step_id", models.SlugField(max_length=100, verbose_name="step id")),
                ("name", models.CharField(max_length=200, verbose_name="name")),
                ("description", models.TextField(blank=True, verbose_name="description")),
                ("required", models.BooleanField(default=False, verbose_name="required")),
                (
                    "allow_multiple",
                    models.BooleanField(
                        default=False,
                        help_text="Multi-select step (e.g. accessories)",
                        verbose_name="allow multiple",
                    ),
                ),
                ("position", models.PositiveIntegerField(default=0, verbose_name="position")),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="steps",
                        to="quoteman.configuredproduct",
                        verbose_name="product",
                    ),
                ),
            ],
            options={
                "verbose_name": "wizard step",
                "verbose_name_plural": "wizard steps",
                "ordering": ["product", "position", "id"],
            },
        ),
        migrations.AddConstraint(
            model_name="wizardstep",
            constraint=models.UniqueConstraint(
                fields=("product", "step_id"),
                name="unique_product_step_id",
            ),
        ),
        # StepOption
        migrations.CreateModel(
            name="StepOption",
            fields=[
                pk_field(),
                *step_option_fields(),
                (
                    "step",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="options",
                        to="quoteman.wizardstep",
                        verbose_name="step",
                    ),
                ),
            ],
            options={
                "verbose_name": "step option",
                "verbose_name_plural": "step options",
                "ordering": ["step", "position", "id"],
            },
        ),
        migrations.AddConstraint(
            model_name="stepoption",
            constraint=models.UniqueConstraint(
                fields=("step", "option_id"),
                name="unique_step_option_id",
            ),
        ),
        migrations.CreateModel(
            name="HistoricalStepOption",
            fields=[
                historical_pk_field(),
                *step_option_fields(),
                *history_fields(),
                (
                    "step",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to="quoteman.wizardstep",
                        verbose_name="step",
                    ),
                ),
            ],
            options={
                "verbose_name": "historical step option",
                "verbose_name_plural": "historical step options",
                **HISTORY_OPTIONS,
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        # CatalogEntry
        migrations.CreateModel(
            name="CatalogEntry",
            fields=[
                pk_field(),
                *catalog_entry_fields(),
                *timestamps(),
                (
                    "keywords",
                    taggit.managers.TaggableManager(
                        blank=True,
                        help_text="Search tags. Comma separated.",
                        through="taggit.TaggedItem",
                        to="taggit.Tag",
                        verbose_name="keywords",
                    ),
                ),
            ],
            options={
                "verbose_name": "catalog entry",
                "verbose_name_plural": "catalog entries",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="HistoricalCatalogEntry",
            fields=[
                historical_pk_field(),
                *catalog_entry_fields(),
                *timestamps(historical=True),
                *history_fields(),
            ],
            options={
                "verbose_name": "historical catalog entry",
                "verbose_name_plural": "historical catalog entries",
                **HISTORY_OPTIONS,
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        # DiscountCampaign
        migrations.CreateModel(
            name="DiscountCampaign",
            fields=[
                pk_field(),
                ("code", models.SlugField(unique=True, verbose_name="code")),
                ("name", models.CharField(max_length=200, verbose_name="name")),
                ("description", models.TextField(blank=True, verbose_name="description")),
                (
                    "discount_type",
                    models.CharField(
                        choices=[("percentage", "Percentage"), ("fixed", "Fixed amount")],
                        default="percentage",
                        max_length=20,
                        verbose_name="discount type",
                    ),
                ),
                (
                    "discount_value",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Percentage (0-100) or fixed amount excl. tax",
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                        verbose_name="discount value",
                    ),
                ),
                (
                    "applies_to",
                    models.CharField(
                        choices=[("all", "All products"), ("specific", "Specific products")],
                        default="all",
                        max_length=20,
                        verbose_name="applies to",
                    ),
                ),
                (
                    "product_ids",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Configured product ids when applies to specific products",
                        verbose_name="product ids",
                    ),
                ),
                ("starts_at", models.DateTimeField(blank=True, null=True, verbose_name="starts at")),
                ("ends_at", models.DateTimeField(blank=True, null=True, verbose_name="ends at")),
                ("priority", models.IntegerField(default=0, verbose_name="priority")),
                ("is_active", models.BooleanField(default=True, verbose_name="active")),
                *timestamps(),
            ],
            options={
                "verbose_name": "discount campaign",
                "verbose_name_plural": "discount campaigns",
                "ordering": ["-priority", "name"],
            },
        ),
        # QuoteRecord
        migrations.CreateModel(
            name="QuoteRecord",
            fields=[
                pk_field(),
                *quote_record_fields(),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                quote_payload_field(),
            ],
            options={
                "verbose_name": "quote",
                "verbose_name_plural": "quotes",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="HistoricalQuoteRecord",
            fields=[
                historical_pk_field(),
                *quote_record_fields(historical=True),
                ("updated_at", models.DateTimeField(blank=True, editable=False, verbose_name="updated at")),
                quote_payload_field(),
                *history_fields(),
            ],
            options={
                "verbose_name": "historical quote",
                "verbose_name_plural": "historical quotes",
                **HISTORY_OPTIONS,
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
    ]
