from django.apps import AppConfig


class SlotConfigurationConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "slot_configuration"
    verbose_name = "Slot configurations"
