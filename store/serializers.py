from rest_framework import serializers

from slot_configuration.models import SlotConfiguration

from .models import Store


class StoreSerializer(serializers.ModelSerializer):
    published_pages = serializers.SerializerMethodField()

    class Meta:
        model = Store
        fields = "__all__"

    def get_published_pages(self, obj):
        return sorted(
            set(
                SlotConfiguration.objects.filter(
                    store=obj, status="published"
                ).values_list("page_type", flat=True)
            )
        )
