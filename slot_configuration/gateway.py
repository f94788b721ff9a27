"""
Persistence gateway for slot configurations.

The only module that touches the ORM. Every call is synchronous and
returns plain serialized dicts; async callers wrap it with
``sync_to_async``.
"""

import copy
import logging

from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from .defaults import default_configuration
from .exceptions import DraftAlreadyPublished, DraftNotFound, NoPublishedConfiguration, RevertNotAllowed
from .models import SlotConfiguration
from .serializers import SlotConfigurationHistorySerializer, SlotConfigurationSerializer
from .slots import PAGE_TYPE_NAMES

logger = logging.getLogger(__name__)

EDITABLE_STATUSES = ("init", "draft")


def _serialize(instance):
    if instance is None:
        return None
    return dict(SlotConfigurationSerializer(instance).data)


class SlotConfigurationGateway:
    model = SlotConfiguration

    # ------------------------------
    # Lookups
    # ------------------------------
    def _draft_queryset(self, store_id, page_type):
        return self.model.objects.filter(
            store_id=store_id, page_type=page_type, status__in=EDITABLE_STATUSES
        ).order_by("-updated_at", "-id")

    def _latest_published(self, store_id, page_type):
        return (
            self.model.objects.filter(
                store_id=store_id, page_type=page_type, status="published"
            )
            .order_by("-version_number", "-id")
            .first()
        )

    def _next_version_number(self, store_id, page_type):
        latest = self.model.objects.filter(
            store_id=store_id, page_type=page_type, status="published"
        ).aggregate(latest=Max("version_number"))["latest"]
        return (latest or 0) + 1

    def find_draft(self, store_id, page_type):
        return _serialize(self._draft_queryset(store_id, page_type).first())

    def get_draft(self, store_id, page_type):
        """Current draft, creating an empty ``init`` record when none exists."""
        draft = self._draft_queryset(store_id, page_type).first()
        if draft is None:
            draft = self.model.objects.create(
                store_id=store_id,
                page_type=page_type,
                status="init",
                configuration={},
                parent_version=self._latest_published(store_id, page_type),
            )
            logger.info(f"Created init draft {draft.id} for store {store_id} {page_type}")
        return _serialize(draft)

    def get_published(self, store_id, page_type):
        return _serialize(self._latest_published(store_id, page_type))

    def get_version_history(self, store_id, page_type, limit=20):
        versions = self.model.objects.filter(
            store_id=store_id, page_type=page_type, status="published"
        ).order_by("-version_number", "-id")[:limit]
        return list(SlotConfigurationHistorySerializer(versions, many=True).data)

    # ------------------------------
    # Writes
    # ------------------------------
    def save_draft(self, draft_id, configuration, store_id, is_reset=False):
        draft = self.model.objects.filter(
            id=draft_id, store_id=store_id, status__in=EDITABLE_STATUSES
        ).first()
        if draft is None:
            raise DraftNotFound(f"Draft {draft_id} not found for store {store_id}")

        draft.configuration = configuration
        draft.status = "draft"
        draft.has_unpublished_changes = not is_reset
        draft.save(
            update_fields=["configuration", "status", "has_unpublished_changes", "updated_at"]
        )
        return _serialize(draft)

    @transaction.atomic
    def publish(self, draft_id, store_id):
        """Freeze a draft as the next published version."""
        draft = (
            self.model.objects.select_for_update()
            .filter(id=draft_id, store_id=store_id)
            .first()
        )
        if draft is None or draft.status != "draft":
            raise DraftAlreadyPublished(f"Draft {draft_id} is no longer publishable")

        version_number = self._next_version_number(store_id, draft.page_type)
        draft.parent_version = self._latest_published(store_id, draft.page_type)
        draft.status = "published"
        draft.version_number = version_number
        draft.version = f"{version_number}.0"
        draft.has_unpublished_changes = False
        draft.published_at = timezone.now()
        draft.save()
        logger.info(
            f"Published {draft.page_type} v{version_number} for store {store_id}"
        )
        return _serialize(draft)

    def create_draft_from_published(self, store_id, configuration, page_type):
        published = self._latest_published(store_id, page_type)
        draft = self._draft_queryset(store_id, page_type).first()
        if draft is None:
            draft = self.model(store_id=store_id, page_type=page_type)
        draft.configuration = copy.deepcopy(configuration)
        draft.status = "draft"
        draft.has_unpublished_changes = False
        draft.parent_version = published
        draft.current_edit = None
        draft.metadata = {}
        draft.save()
        return _serialize(draft)

    @transaction.atomic
    def revert_draft(self, version_id):
        """Copy a published version into the draft, remembering what it replaced."""
        version = self.model.objects.get(id=version_id, status="published")
        draft = self._draft_queryset(version.store_id, version.page_type).first()

        revert_metadata = {
            "revertedFromVersion": version.version_number,
            "revertedAt": timezone.now().isoformat(),
            "originalConfiguration": None,
            "originalHasUnpublishedChanges": False,
        }
        if draft is None:
            draft = self.model(store_id=version.store_id, page_type=version.page_type)
        else:
            revert_metadata["originalConfiguration"] = draft.configuration
            revert_metadata["originalHasUnpublishedChanges"] = draft.has_unpublished_changes

        draft.configuration = copy.deepcopy(version.configuration)
        draft.status = "draft"
        draft.has_unpublished_changes = True
        draft.current_edit = version
        draft.metadata = {**(draft.metadata or {}), "revertMetadata": revert_metadata}
        draft.save()
        logger.info(f"Reverted draft {draft.id} to published v{version.version_number}")
        return _serialize(draft)

    @transaction.atomic
    def undo_revert(self, draft_id):
        """Restore the draft replaced by ``revert_draft``; None when it was removed."""
        draft = self.model.objects.get(id=draft_id, status__in=EDITABLE_STATUSES)
        revert_metadata = (draft.metadata or {}).get("revertMetadata")
        if not revert_metadata:
            raise RevertNotAllowed(f"Draft {draft_id} has no revert to undo")

        original = revert_metadata.get("originalConfiguration")
        if original is None:
            draft.delete()
            logger.info(f"Removed draft {draft_id} created by a revert")
            return None

        metadata = dict(draft.metadata)
        metadata.pop("revertMetadata")
        draft.configuration = original
        draft.has_unpublished_changes = revert_metadata.get(
            "originalHasUnpublishedChanges", True
        )
        draft.current_edit = None
        draft.metadata = metadata
        draft.save()
        return _serialize(draft)

    @transaction.atomic
    def destroy(self, store_id, page_type):
        """Drop every version of a page and start over from the default layout."""
        deleted, _ = self.model.objects.filter(
            store_id=store_id, page_type=page_type
        ).delete()
        logger.info(f"Deleted {deleted} {page_type} configurations for store {store_id}")
        published = self.provision(store_id, page_type)
        return self.create_draft_from_published(
            store_id, published["configuration"], page_type
        )

    def provision(self, store_id, page_type):
        """Version 1 published snapshot from the default layout."""
        existing = self._latest_published(store_id, page_type)
        if existing is not None:
            return _serialize(existing)
        published = self.model.objects.create(
            store_id=store_id,
            page_type=page_type,
            status="published",
            configuration=default_configuration(page_type),
            version="1.0",
            version_number=1,
            published_at=timezone.now(),
        )
        return _serialize(published)

    def unpublished_status(self, store_id):
        pages = {}
        for page_type in PAGE_TYPE_NAMES:
            draft = self._draft_queryset(store_id, page_type).filter(status="draft").first()
            published = self._latest_published(store_id, page_type)
            changed = draft is not None and (
                published is None
                or draft.has_unpublished_changes
                or draft.slots != published.slots
            )
            pages[page_type] = {
                "hasUnpublishedChanges": changed,
                "draftId": draft.id if draft else None,
                "publishedVersion": published.version_number if published else None,
            }
        return {
            "storeId": store_id,
            "hasAnyChanges": any(page["hasUnpublishedChanges"] for page in pages.values()),
            "pages": pages,
        }

    @transaction.atomic
    def patch_published_slot(self, store_id, page_type, slot_id, styles=None, class_name=None, content=None):
        """
        Patch one slot of the live layout as a new published version.

        The live draft receives the same patch so it does not fall behind.
        """
        published = self._latest_published(store_id, page_type)
        if published is None:
            raise NoPublishedConfiguration(f"No published {page_type} layout for store {store_id}")

        def patch(configuration):
            configuration = copy.deepcopy(configuration or {})
            slots = configuration.setdefault("slots", {})
            slot = slots.get(slot_id) or {"id": slot_id, "styles": {}}
            if styles:
                slot["styles"] = {**(slot.get("styles") or {}), **styles}
            if class_name is not None:
                slot["className"] = class_name
            if content is not None:
                slot["content"] = content
            slots[slot_id] = slot
            return configuration

        version_number = self._next_version_number(store_id, page_type)
        patched = self.model.objects.create(
            store_id=store_id,
            page_type=page_type,
            status="published",
            configuration=patch(published.configuration),
            version=f"{version_number}.0",
            version_number=version_number,
            parent_version=published,
            published_at=timezone.now(),
        )

        draft = self._draft_queryset(store_id, page_type).filter(status="draft").first()
        if draft is not None:
            draft.configuration = patch(draft.configuration)
            draft.save(update_fields=["configuration", "updated_at"])
        return _serialize(patched)


def provision_default_layouts(store):
    """Published defaults plus a seeded draft for every page type of a new store."""
    gateway = SlotConfigurationGateway()
    provisioned = []
    for page_type in PAGE_TYPE_NAMES:
        published = gateway.provision(store.pk, page_type)
        gateway.create_draft_from_published(store.pk, published["configuration"], page_type)
        provisioned.append(page_type)
    return provisioned
