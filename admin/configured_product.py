"""Configured product admin."""

from django.contrib import admin

from quoteman.models import ConfiguredProduct, StepOption, WizardStep


class WizardStepInline(admin.TabularInline):
    model = WizardStep
    extra = 0
    fields = ["position", "step_id", "name", "required", "allow_multiple"]
    ordering = ["position"]
    show_change_link = True


class StepOptionInline(admin.TabularInline):
    model = StepOption
    extra = 1
    fields = [
        "position",
        "option_id",
        "label",
        "catalog_item_id",
        "price_override_excl_tax",
        "tax_rate_percent",
        "quantity",
        "is_default",
    ]
    ordering = ["position"]


@admin.register(ConfiguredProduct)
class ConfiguredProductAdmin(admin.ModelAdmin):
    list_display = ["product_id", "name", "currency", "steps_count", "is_active"]
    list_filter = ["is_active", "currency"]
    search_fields = ["product_id", "name"]
    readonly_fields = ["uuid", "created_at", "updated_at", "configuration_status"]
    inlines = [WizardStepInline]

    fieldsets = [
        (None, {"fields": ("product_id", "name", "currency", "is_active")}),
        ("Validation", {"fields": ("configuration_status",)}),
        (
            "Metadata",
            {
                "fields": ("uuid", "created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    ]

    def steps_count(self, obj):
        return obj.steps.count()

    steps_count.short_description = "Steps"

    def configuration_status(self, obj):
        """List structural problems that would block pricing."""
        if not obj.pk:
            return "-"
        violations = obj.to_configuration().validate()
        if not violations:
            return "OK"
        return "; ".join(
            f"{v.kind.value} ({v.step_id}{'/' + v.option_id if v.option_id else ''})"
            for v in violations
        )

    configuration_status.short_description = "Status"


@admin.register(WizardStep)
class WizardStepAdmin(admin.ModelAdmin):
    list_display = ["step_id", "product", "name", "position", "required", "allow_multiple"]
    list_filter = ["product", "required", "allow_multiple"]
    search_fields = ["step_id", "name", "product__product_id"]
    ordering = ["product", "position"]
    inlines = [StepOptionInline]
