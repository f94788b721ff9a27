import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("store", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="SlotConfiguration",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "page_type",
                    models.CharField(
                        choices=[
                            ("product", "Product"),
                            ("cart", "Cart"),
                            ("category", "Category"),
                            ("checkout", "Checkout"),
                            ("login", "Login"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("init", "Init"),
                            ("draft", "Draft"),
                            ("published", "Published"),
                        ],
                        default="init",
                        max_length=10,
                    ),
                ),
                ("configuration", models.JSONField(blank=True, default=dict)),
                ("version", models.CharField(default="1.0", max_length=20)),
                ("version_number", models.PositiveIntegerField(default=1)),
                ("has_unpublished_changes", models.BooleanField(default=False)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("published_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "current_edit",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="edited_from",
                        to="slot_configuration.slotconfiguration",
                    ),
                ),
                (
                    "parent_version",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="derived_versions",
                        to="slot_configuration.slotconfiguration",
                    ),
                ),
                (
                    "store",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="slot_configurations",
                        to="store.store",
                    ),
                ),
            ],
            options={
                "ordering": ["-version_number", "-created_at"],
                "indexes": [
                    models.Index(
                        fields=["store", "page_type", "status"],
                        name="slot_config_lookup_idx",
                    )
                ],
            },
        ),
    ]
