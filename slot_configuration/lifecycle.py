"""
Draft / publish / reset lifecycle of one store page layout.

``SlotLayoutManager`` owns the init -> draft -> published transitions.
Methods are synchronous; the ``a``-prefixed twins run them through
``sync_to_async`` for websocket consumers.
"""

import copy
import logging

from asgiref.sync import sync_to_async
from django.db import DatabaseError, transaction

from . import operations, repositioning
from .conf import editor_setting
from .defaults import fallback_configuration
from .exceptions import (
    DraftAlreadyPublished,
    DraftNotFound,
    EmptyPublishedConfiguration,
    InvalidSlotConfiguration,
    NoPublishedConfiguration,
)
from .gateway import SlotConfigurationGateway
from .resolver import strip_instances
from .validators import collect_violations

logger = logging.getLogger(__name__)


def _slots_of(record):
    return ((record or {}).get("configuration") or {}).get("slots") or {}


class SlotLayoutManager:
    def __init__(self, store_id, page_type, gateway=None):
        self.store_id = store_id
        self.page_type = page_type
        self.gateway = gateway or SlotConfigurationGateway()

    def __repr__(self):
        return f"<SlotLayoutManager store={self.store_id} page={self.page_type}>"

    # ------------------------------
    # Persistence
    # ------------------------------
    def _require_published(self):
        published = self.gateway.get_published(self.store_id, self.page_type)
        if published is None:
            raise NoPublishedConfiguration(
                f"No published {self.page_type} layout for store {self.store_id}"
            )
        return published

    def get_draft(self):
        """
        Current draft, populated from the latest published snapshot when it
        is still ``init`` or has no slots.
        """
        draft = self.gateway.get_draft(self.store_id, self.page_type)
        if draft["status"] != "init" and _slots_of(draft):
            return draft

        published = self._require_published()
        configuration = copy.deepcopy(published["configuration"])
        logger.info(
            f"Populating draft {draft['id']} from published v{published['version_number']}"
        )
        return self.gateway.save_draft(
            draft["id"], configuration, self.store_id, is_reset=True
        )

    def save(self, configuration, is_reset=False):
        slots = configuration.get("slots") or {}
        draft = self.gateway.get_draft(self.store_id, self.page_type)
        violations = collect_violations(slots, previous=_slots_of(draft))
        if violations:
            for violation in violations:
                logger.error(
                    f"Rejected save [{violation.rule}] {violation.slot_id}: {violation.message}"
                )
            raise InvalidSlotConfiguration(violations)

        configuration = {**configuration, "slots": strip_instances(slots)}
        return self.gateway.save_draft(draft["id"], configuration, self.store_id, is_reset)

    def publish(self):
        draft = self.gateway.find_draft(self.store_id, self.page_type)
        if draft is None or draft["status"] == "init":
            raise DraftNotFound(
                f"No draft to publish for {self.page_type} in store {self.store_id}"
            )

        try:
            with transaction.atomic():
                published = self.gateway.publish(draft["id"], self.store_id)
                self.gateway.create_draft_from_published(
                    self.store_id, published["configuration"], self.page_type
                )
        except DraftAlreadyPublished:
            logger.info(f"Draft {draft['id']} already published, nothing to do")
            return self.gateway.get_published(self.store_id, self.page_type)
        return published

    def reset_layout(self):
        published = self._require_published()
        if not _slots_of(published):
            raise EmptyPublishedConfiguration(
                f"Published {self.page_type} layout for store {self.store_id} has no slots"
            )
        draft = self.gateway.get_draft(self.store_id, self.page_type)
        logger.info(f"Resetting draft {draft['id']} to published v{published['version_number']}")
        return self.gateway.save_draft(
            draft["id"], copy.deepcopy(published["configuration"]), self.store_id, is_reset=True
        )

    def load_layout(self, draft=False):
        """
        Configuration to render. Storage errors fall back to the default
        layout tagged with ``fallbackUsed`` and ``fallbackReason``.
        """
        try:
            record = self.get_draft() if draft else self.gateway.get_published(
                self.store_id, self.page_type
            )
        except DatabaseError as exc:
            logger.warning(f"Falling back to default {self.page_type} layout: {exc}")
            return fallback_configuration(self.page_type, f"Error loading configuration: {exc}")

        if not _slots_of(record):
            return fallback_configuration(
                self.page_type, "No valid published configuration: no slots found"
            )
        return record["configuration"]

    def history(self, limit=None):
        return self.gateway.get_version_history(
            self.store_id, self.page_type, limit or editor_setting("HISTORY_LIMIT")
        )

    # ------------------------------
    # In-memory mutations
    # ------------------------------
    def drop(self, slots, dragged_id, target_id, drop_position):
        return repositioning.drop(dragged_id, target_id, drop_position, slots)

    def create_slot(self, slots, slot_type, content="", parent_id=None, additional=None):
        return operations.create_slot(
            slots, slot_type, content, parent_id, self.page_type, additional
        )

    def delete_slot(self, slots, slot_id):
        return operations.delete_slot(slots, slot_id)

    def text_change(self, slots, slot_id, content):
        return operations.text_change(slots, slot_id, content)

    def class_change(self, slots, slot_id, class_name, styles=None, metadata=None):
        return operations.class_change(slots, slot_id, class_name, styles, metadata)

    def grid_resize(self, slots, slot_id, col_span):
        return operations.grid_resize(slots, slot_id, col_span)

    def height_resize(self, slots, slot_id, height):
        return operations.height_resize(slots, slot_id, height)

    # ------------------------------
    # Async twins
    # ------------------------------
    async def aget_draft(self):
        return await sync_to_async(self.get_draft)()

    async def asave(self, configuration, is_reset=False):
        return await sync_to_async(self.save)(configuration, is_reset)

    async def apublish(self):
        return await sync_to_async(self.publish)()

    async def areset_layout(self):
        return await sync_to_async(self.reset_layout)()

    async def aload_layout(self, draft=False):
        return await sync_to_async(self.load_layout)(draft)


def publish_all(store_id, gateway=None):
    """Publish every page whose draft differs from what is live."""
    gateway = gateway or SlotConfigurationGateway()
    status = gateway.unpublished_status(store_id)
    published = {}
    for page_type, page in status["pages"].items():
        if page["hasUnpublishedChanges"]:
            record = SlotLayoutManager(store_id, page_type, gateway).publish()
            published[page_type] = record["version_number"]
    return published
