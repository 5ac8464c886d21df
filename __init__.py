"""
Quoteman - product configurator pricing and quotes.

Usage:
    from quoteman import QuoteService, QuotemanError

    result = QuoteService.create_quote(
        "skuare",
        {"heater": ["aava-4-7kw"], "lighting": ["led-under-bench"]},
        customer=Customer(email="buyer@example.com"),
    )
    if result.ok:
        quote = result.value
"""


def __getattr__(name):
    if name == "QuoteService":
        from quoteman.service import QuoteService

        return QuoteService
    elif name == "QuotemanError":
        from quoteman.exceptions import QuotemanError

        return QuotemanError
    elif name == "Customer":
        from quoteman.quotes import Customer

        return Customer
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["Customer", "QuoteService", "QuotemanError"]
__version__ = "0.1.0"
