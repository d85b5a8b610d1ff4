from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.payments"
    label = "payments"

    def ready(self) -> None:
        from modules.payments.handlers import SUBSCRIPTIONS
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe_all(SUBSCRIPTIONS)
