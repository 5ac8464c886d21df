"""Quote admin."""

from django.contrib import admin, messages
from django.utils.html import format_html

from quoteman.models import QuoteRecord
from quoteman.quotes import QuoteStatus

STATUS_COLORS = {
    QuoteStatus.DRAFT.value: ("#6c757d", "#fff"),
    QuoteStatus.SENT.value: ("#0d6efd", "#fff"),
    QuoteStatus.ACCEPTED.value: ("#28a745", "#fff"),
    QuoteStatus.EXPIRED.value: ("#ffc107", "#000"),
}


@admin.register(QuoteRecord)
class QuoteRecordAdmin(admin.ModelAdmin):
    list_display = [
        "quote_id",
        "product_id",
        "customer_email",
        "formatted_total",
        "status_badge",
        "created_at",
        "valid_until",
    ]
    list_filter = ["status", "product_id", "currency"]
    search_fields = ["quote_id", "customer_email", "product_id"]
    date_hierarchy = "created_at"
    # Quotes are immutable: pricing fields are never edited here.
    readonly_fields = [
        "quote_id",
        "product_id",
        "status",
        "customer_email",
        "currency",
        "total_incl_tax",
        "created_at",
        "valid_until",
        "updated_at",
        "payload",
    ]

    def has_add_permission(self, request):
        return False

    def formatted_total(self, obj):
        return f"{obj.currency} {obj.total_incl_tax:.2f}"

    formatted_total.short_description = "Total"
    formatted_total.admin_order_field = "total_incl_tax"

    def status_badge(self, obj):
        background, color = STATUS_COLORS.get(obj.status, ("#6c757d", "#fff"))
        return format_html(
            '<span style="background-color:{};color:{};'
            'padding:2px 6px;border-radius:3px;font-size:11px;">{}</span>',
            background,
            color,
            obj.status.title(),
        )

    status_badge.short_description = "Status"

    actions = ["mark_sent", "mark_accepted", "mark_expired"]

    def _move(self, request, queryset, status: QuoteStatus):
        from quoteman.service import QuoteService

        moved = 0
        for record in queryset:
            result = QuoteService.set_status(record.quote_id, status)
            if result.ok:
                moved += 1
            else:
                self.message_user(
                    request,
                    f"{record.quote_id}: {result.error.message}",
                    level=messages.WARNING,
                )
        self.message_user(request, f"{moved} quote(s) marked {status.value}.")

    @admin.action(description="Mark selected quotes as sent")
    def mark_sent(self, request, queryset):
        self._move(request, queryset, QuoteStatus.SENT)

    @admin.action(description="Mark selected quotes as accepted")
    def mark_accepted(self, request, queryset):
        self._move(request, queryset, QuoteStatus.ACCEPTED)

    @admin.action(description="Mark selected quotes as expired")
    def mark_expired(self, request, queryset):
        self._move(request, queryset, QuoteStatus.EXPIRED)
