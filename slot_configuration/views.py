import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from django_filters import rest_framework as django_filters
from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from storefront_layout.utils.error_handler import bad_request, not_found
from store.models import Store

from .conf import editor_setting
from .defaults import default_configuration
from .gateway import SlotConfigurationGateway
from .lifecycle import SlotLayoutManager, publish_all
from .models import SlotConfiguration
from .notifications import notify_layout_changed
from .serializers import (
    CreateDraftFromPublishedSerializer,
    PublishedSlotPatchSerializer,
    SaveDraftSerializer,
    SlotConfigurationHistorySerializer,
)
from .slots import PAGE_TYPE_NAMES

logger = logging.getLogger(__name__)


class LayoutView(APIView):
    """Base for views addressed by ``<store_id>/<page_type>``."""

    permission_classes = [AllowAny]

    def get_manager(self):
        store_id = self.kwargs["store_id"]
        page_type = self.kwargs["page_type"]
        get_object_or_404(Store, pk=store_id)
        if page_type not in PAGE_TYPE_NAMES:
            return None
        return SlotLayoutManager(store_id, page_type)

    def unknown_page_type(self):
        return not_found(
            f"Unknown page type {self.kwargs['page_type']!r}",
            params={"pageTypes": list(PAGE_TYPE_NAMES)},
        )


# ------------------------------
# Draft
# ------------------------------
class DraftView(LayoutView):
    def get(self, request, store_id, page_type):
        manager = self.get_manager()
        if manager is None:
            return self.unknown_page_type()
        return Response({"success": True, "data": manager.get_draft()})

    def put(self, request, store_id, page_type):
        manager = self.get_manager()
        if manager is None:
            return self.unknown_page_type()
        serializer = SaveDraftSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        draft = manager.save(
            serializer.validated_data["configuration"],
            is_reset=serializer.validated_data["isReset"],
        )
        notify_layout_changed(store_id, page_type)
        return Response({"success": True, "data": draft})


class PublishView(LayoutView):
    def post(self, request, store_id, page_type):
        manager = self.get_manager()
        if manager is None:
            return self.unknown_page_type()
        published = manager.publish()
        notify_layout_changed(store_id, page_type)
        return Response({"success": True, "data": published}, status=status.HTTP_201_CREATED)


class ResetLayoutView(LayoutView):
    def post(self, request, store_id, page_type):
        manager = self.get_manager()
        if manager is None:
            return self.unknown_page_type()
        draft = manager.reset_layout()
        notify_layout_changed(store_id, page_type)
        return Response({"success": True, "data": draft})


class PublishedLayoutView(LayoutView):
    """Storefront read: latest published layout or the default fallback."""

    def get(self, request, store_id, page_type):
        manager = self.get_manager()
        if manager is None:
            return self.unknown_page_type()
        return Response({"success": True, "data": manager.load_layout()})


class DestroyLayoutView(LayoutView):
    def post(self, request, store_id, page_type):
        manager = self.get_manager()
        if manager is None:
            return self.unknown_page_type()
        draft = manager.gateway.destroy(store_id, page_type)
        notify_layout_changed(store_id, page_type)
        return Response({"success": True, "data": draft})


class PublishedSlotPatchView(LayoutView):
    def patch(self, request, store_id, page_type, slot_id):
        manager = self.get_manager()
        if manager is None:
            return self.unknown_page_type()
        serializer = PublishedSlotPatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if not serializer.validated_data:
            return bad_request("Nothing to update", params={"slotId": slot_id})
        published = manager.gateway.patch_published_slot(
            store_id,
            page_type,
            slot_id,
            styles=serializer.validated_data.get("styles"),
            class_name=serializer.validated_data.get("className"),
            content=serializer.validated_data.get("content"),
        )
        notify_layout_changed(store_id, page_type)
        return Response({"success": True, "data": published})


# ------------------------------
# History & revert
# ------------------------------
class HistoryFilterSet(django_filters.FilterSet):
    published_after = django_filters.IsoDateTimeFilter(
        field_name="published_at", lookup_expr="gte"
    )
    published_before = django_filters.IsoDateTimeFilter(
        field_name="published_at", lookup_expr="lte"
    )

    class Meta:
        model = SlotConfiguration
        fields = ["published_after", "published_before"]


class VersionHistoryView(generics.ListAPIView):
    serializer_class = SlotConfigurationHistorySerializer
    permission_classes = [AllowAny]
    filter_backends = [django_filters.DjangoFilterBackend]
    filterset_class = HistoryFilterSet

    def get_queryset(self):
        return SlotConfiguration.objects.filter(
            store_id=self.kwargs["store_id"],
            page_type=self.kwargs["page_type"],
            status="published",
        ).order_by("-version_number", "-id")

    def list(self, request, *args, **kwargs):
        try:
            limit = int(request.query_params.get("limit", editor_setting("HISTORY_LIMIT")))
        except ValueError:
            return bad_request("limit must be an integer")
        queryset = self.filter_queryset(self.get_queryset())[: max(limit, 0)]
        serializer = self.get_serializer(queryset, many=True)
        return Response({"success": True, "data": serializer.data})


class CreateDraftFromPublishedView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = CreateDraftFromPublishedSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        store = get_object_or_404(Store, pk=serializer.validated_data["storeId"])
        draft = SlotConfigurationGateway().create_draft_from_published(
            store.pk,
            serializer.validated_data["configuration"],
            serializer.validated_data["pageType"],
        )
        return Response({"success": True, "data": draft}, status=status.HTTP_201_CREATED)


class RevertDraftView(APIView):
    permission_classes = [AllowAny]

    def post(self, request, version_id):
        draft = SlotConfigurationGateway().revert_draft(version_id)
        notify_layout_changed(draft["store"], draft["page_type"])
        return Response({"success": True, "data": draft})


class UndoRevertView(APIView):
    permission_classes = [AllowAny]

    def post(self, request, draft_id):
        record = get_object_or_404(SlotConfiguration, pk=draft_id)
        draft = SlotConfigurationGateway().undo_revert(draft_id)
        notify_layout_changed(record.store_id, record.page_type)
        return Response({"success": True, "data": draft})


# ------------------------------
# Store wide
# ------------------------------
class UnpublishedStatusView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, store_id):
        get_object_or_404(Store, pk=store_id)
        return Response(
            {"success": True, "data": SlotConfigurationGateway().unpublished_status(store_id)}
        )


class PublishAllView(APIView):
    permission_classes = [AllowAny]

    @transaction.atomic
    def post(self, request, store_id):
        get_object_or_404(Store, pk=store_id)
        published = publish_all(store_id)
        for page_type in published:
            transaction.on_commit(
                lambda page_type=page_type: notify_layout_changed(store_id, page_type)
            )
        logger.info(f"Published {len(published)} layouts for store {store_id}")
        return Response({"success": True, "data": {"published": published}})


class DefaultLayoutView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, page_type):
        if page_type not in PAGE_TYPE_NAMES:
            return not_found(f"Unknown page type {page_type!r}")
        return Response({"success": True, "data": default_configuration(page_type)})
