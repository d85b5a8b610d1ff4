from django.apps import AppConfig


class LoyaltyConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.loyalty"
    label = "loyalty"

    def ready(self) -> None:
        from modules.loyalty.handlers import SUBSCRIPTIONS
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe_all(SUBSCRIPTIONS)
