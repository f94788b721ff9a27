from rest_framework import serializers

from .models import SlotConfiguration
from .slots import PAGE_TYPE_NAMES


class SlotConfigurationSerializer(serializers.ModelSerializer):
    class Meta:
        model = SlotConfiguration
        fields = "__all__"


class SlotConfigurationHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = SlotConfiguration
        fields = [
            "id",
            "page_type",
            "version",
            "version_number",
            "configuration",
            "published_at",
            "parent_version",
        ]


class SaveDraftSerializer(serializers.Serializer):
    configuration = serializers.JSONField()
    isReset = serializers.BooleanField(default=False)

    def validate_configuration(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("configuration must be an object")
        if not isinstance(value.get("slots"), dict):
            raise serializers.ValidationError("configuration.slots must be an object")
        return value


class CreateDraftFromPublishedSerializer(serializers.Serializer):
    storeId = serializers.IntegerField()
    pageType = serializers.ChoiceField(choices=PAGE_TYPE_NAMES)
    configuration = serializers.JSONField()


class PublishedSlotPatchSerializer(serializers.Serializer):
    styles = serializers.DictField(required=False)
    className = serializers.CharField(required=False, allow_blank=True)
    content = serializers.CharField(required=False, allow_blank=True)
