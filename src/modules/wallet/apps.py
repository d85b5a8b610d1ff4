from django.apps import AppConfig


class WalletConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.wallet"
    label = "wallet"

    def ready(self) -> None:
        from modules.wallet.handlers import SUBSCRIPTIONS
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe_all(SUBSCRIPTIONS)
