"""
Quoteman signals.

Signals:
    configuration_saved:
        Sent after a ProductConfiguration is persisted through QuoteService.

        Kwargs:
            sender: QuoteService class
            config: The ProductConfiguration that was saved
            product_id: str

    quote_created:
        Sent after a new Quote is persisted.

        Kwargs:
            sender: QuoteService class
            quote: The Quote instance
            quote_id: str

        Example handler::

            from quoteman.signals import quote_created

            def on_quote_created(sender, quote, quote_id, **kwargs):
                crm.create_deal(quote)

            quote_created.connect(on_quote_created)

    quote_status_changed:
        Sent after a Quote's status moves (draft -> sent -> accepted/expired).

        Kwargs:
            sender: QuoteService class
            quote: The updated Quote
            quote_id: str
            old_status: str
            new_status: str
"""

from django.dispatch import Signal

configuration_saved = Signal()
quote_created = Signal()
quote_status_changed = Signal()
