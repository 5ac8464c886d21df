from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class QuotemanConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "quoteman"
    verbose_name = _("Configurator & Quotes")
