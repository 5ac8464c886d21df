"""Discount campaign and catalog entry admin."""

from django.contrib import admin

from quoteman.models import CatalogEntry, DiscountCampaign


@admin.register(DiscountCampaign)
class DiscountCampaignAdmin(admin.ModelAdmin):
    list_display = [
        "code",
        "name",
        "discount_type",
        "discount_value",
        "applies_to",
        "starts_at",
        "ends_at",
        "priority",
        "is_active",
    ]
    list_filter = ["is_active", "discount_type", "applies_to"]
    search_fields = ["code", "name"]
    list_editable = ["is_active", "priority"]
    ordering = ["-priority", "name"]

    fieldsets = [
        (None, {"fields": ("code", "name", "description")}),
        ("Discount", {"fields": ("discount_type", "discount_value")}),
        ("Scope", {"fields": ("applies_to", "product_ids")}),
        ("Validity", {"fields": ("starts_at", "ends_at")}),
        ("Settings", {"fields": ("priority", "is_active")}),
    ]


@admin.register(CatalogEntry)
class CatalogEntryAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "code", "formatted_price", "tax_rate_percent", "is_active"]
    list_filter = ["is_active", "currency"]
    search_fields = ["name", "code", "keywords__name"]
    readonly_fields = ["created_at", "updated_at"]

    def formatted_price(self, obj):
        return f"{obj.currency} {obj.unit_price_excl_tax:.2f}"

    formatted_price.short_description = "Price (excl. tax)"
    formatted_price.admin_order_field = "unit_price_excl_tax"
