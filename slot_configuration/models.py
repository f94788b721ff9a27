from django.db import models

from store.models import Store

from .slots import PAGE_TYPES


class SlotConfiguration(models.Model):
    STATUS = (
        ("init", "Init"),
        ("draft", "Draft"),
        ("published", "Published"),
    )

    store = models.ForeignKey(
        Store, on_delete=models.CASCADE, related_name="slot_configurations"
    )
    page_type = models.CharField(max_length=20, choices=PAGE_TYPES)
    status = models.CharField(max_length=10, choices=STATUS, default="init")
    configuration = models.JSONField(default=dict, blank=True)
    version = models.CharField(max_length=20, default="1.0")
    version_number = models.PositiveIntegerField(default=1)
    has_unpublished_changes = models.BooleanField(default=False)
    parent_version = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="derived_versions",
    )
    current_edit = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="edited_from",
    )
    metadata = models.JSONField(default=dict, blank=True)
    published_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-version_number", "-created_at"]
        indexes = [
            models.Index(
                fields=["store", "page_type", "status"], name="slot_config_lookup_idx"
            ),
        ]

    def __str__(self):
        return f"{self.page_type} v{self.version_number} ({self.status})"

    @property
    def slots(self):
        return (self.configuration or {}).get("slots") or {}
