from django.apps import AppConfig


class FinanceConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.finance"
    label = "finance"

    def ready(self) -> None:
        from modules.finance.handlers import SUBSCRIPTIONS
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe_all(SUBSCRIPTIONS)
