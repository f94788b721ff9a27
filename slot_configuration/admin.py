from django.contrib import admin

from .models import SlotConfiguration


@admin.register(SlotConfiguration)
class SlotConfigurationAdmin(admin.ModelAdmin):
    list_display = (
        "store",
        "page_type",
        "status",
        "version_number",
        "has_unpublished_changes",
        "published_at",
        "id",
    )
    list_filter = ("page_type", "status")
