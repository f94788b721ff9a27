import json
import logging

from channels.generic.websocket import AsyncWebsocketConsumer
from django.db import DatabaseError

from .coalescing import DragGuard, SaveCoalescer
from .exceptions import InvalidSlotConfiguration, SlotConfigurationError
from .lifecycle import SlotLayoutManager
from .notifications import LayoutChanged, broadcast, layout_group_name
from .slots import PAGE_TYPE_NAMES
from .validators import collect_violations

logger = logging.getLogger(__name__)

# string ids each gesture needs before it reaches the engine
REQUIRED_FIELDS = {
    "drop": ("draggedId", "targetId"),
    "delete_slot": ("slotId",),
    "text_change": ("slotId",),
    "class_change": ("slotId",),
    "grid_resize": ("slotId",),
    "height_resize": ("slotId",),
}
NUMERIC_FIELDS = {
    "grid_resize": "colSpan",
    "height_resize": "height",
}


def invalid_fields(action, data):
    """Names of missing or mistyped fields in a gesture frame."""
    invalid = [
        key for key in REQUIRED_FIELDS.get(action, ()) if not isinstance(data.get(key), str)
    ]
    numeric = NUMERIC_FIELDS.get(action)
    if numeric in data:
        value = data[numeric]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            invalid.append(numeric)
    return invalid


class LayoutEditorConsumer(AsyncWebsocketConsumer):
    """
    One editor session on the draft layout of a store page.

    Gestures are applied to the in-memory draft in arrival order. Resize
    and drag edits are saved after a quiet period, everything else is
    saved right away.
    """

    async def connect(self):
        kwargs = self.scope["url_route"]["kwargs"]
        self.store_id = kwargs["store_id"]
        self.page_type = kwargs["page_type"]
        if self.page_type not in PAGE_TYPE_NAMES:
            await self.close(code=4004)
            return

        self.room_group_name = layout_group_name(self.store_id, self.page_type)
        self.manager = SlotLayoutManager(self.store_id, self.page_type)
        self.configuration = None
        self.coalescer = SaveCoalescer(self.persist, on_error=self.report_save_error)
        self.drag_guard = DragGuard()

        # Add to group
        await self.channel_layer.group_add(self.room_group_name, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if not hasattr(self, "room_group_name"):
            return
        if self.coalescer.pending:
            try:
                await self.coalescer.flush_now()
            except (SlotConfigurationError, DatabaseError) as exc:
                logger.warning(f"Could not flush pending save on disconnect: {exc}")
        # Leave group
        await self.channel_layer.group_discard(self.room_group_name, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data or "")
        except json.JSONDecodeError:
            await self.send_action("error", message="Invalid JSON")
            return

        if not isinstance(data, dict):
            await self.send_action("error", message="Expected a JSON object")
            return

        action = data.get("action")
        invalid = invalid_fields(action, data)
        if invalid:
            await self.send_action(
                "error", message=f"Invalid {action} frame", params={"fields": invalid}
            )
            return

        try:
            await self.dispatch_action(action, data)
        except SlotConfigurationError as exc:
            await self.send_action(
                "error",
                code=exc.error_code,
                message=str(exc.detail),
                params=exc.params,
            )
        except DatabaseError as exc:
            logger.warning(f"Storage error while handling {action}: {exc}")
            await self.send_action(
                "error", message="Layout storage is unavailable", recoverable=True
            )

    async def dispatch_action(self, action, data):
        if action == "get_draft":
            await self.get_draft()
        elif action == "drop":
            await self.drop(data)
        elif action == "create_slot":
            await self.create_slot(data)
        elif action == "delete_slot":
            await self.delete_slot(data)
        elif action == "text_change":
            await self.text_change(data)
        elif action == "class_change":
            await self.class_change(data)
        elif action == "grid_resize":
            await self.grid_resize(data)
        elif action == "height_resize":
            await self.height_resize(data)
        elif action == "save":
            await self.save(data)
        elif action == "publish":
            await self.publish()
        elif action == "reset_layout":
            await self.reset_layout()
        else:
            await self.send_action("error", message=f"Unknown action: {action}")

    async def send_action(self, action, **payload):
        await self.send(text_data=json.dumps({"action": action, **payload}))

    # --- Draft state ---
    @property
    def slots(self):
        return (self.configuration or {}).get("slots") or {}

    async def load_draft(self):
        draft = await self.manager.aget_draft()
        self.configuration = draft["configuration"]
        return draft

    async def ensure_loaded(self):
        if self.configuration is None:
            await self.load_draft()

    async def persist(self, configuration):
        draft = await self.manager.asave(configuration)
        await broadcast(LayoutChanged(self.store_id, self.page_type), self.channel_name)
        await self.send_action(
            "saved",
            draftId=draft["id"],
            hasUnpublishedChanges=draft["has_unpublished_changes"],
        )
        return draft

    async def report_save_error(self, exc):
        if isinstance(exc, SlotConfigurationError):
            await self.send_action(
                "error", code=exc.error_code, message=str(exc.detail), params=exc.params
            )
        else:
            await self.send_action(
                "error", message="Could not save layout", recoverable=True
            )

    async def commit(self, gesture, slots, debounce=False, **extra):
        """Accept a mutated slot map locally, then save it."""
        if slots is None:
            await self.send_action("mutation_rejected", gesture=gesture)
            return

        violations = collect_violations(slots, previous=self.slots)
        if violations:
            raise InvalidSlotConfiguration(violations)

        self.configuration = {**self.configuration, "slots": slots}
        await self.send_action("slots_updated", gesture=gesture, slots=slots, **extra)
        if debounce:
            self.coalescer.schedule(self.configuration)
        else:
            await self.coalescer.flush_now(self.configuration)

    # --- Gestures ---
    async def get_draft(self):
        draft = await self.load_draft()
        await self.send_action("draft", data=draft)

    async def drop(self, data):
        await self.ensure_loaded()
        self.drag_guard.start()
        try:
            slots = self.manager.drop(
                self.slots,
                data.get("draggedId"),
                data.get("targetId"),
                data.get("position"),
            )
        finally:
            self.drag_guard.release()
        await self.commit("drop", slots, debounce=True)

    async def create_slot(self, data):
        await self.ensure_loaded()
        result = self.manager.create_slot(
            self.slots,
            data.get("slotType"),
            data.get("content", ""),
            data.get("parentId"),
            data.get("additional"),
        )
        if result is None:
            await self.commit("create_slot", None)
            return
        slots, slot_id = result
        await self.commit("create_slot", slots, slotId=slot_id)

    async def delete_slot(self, data):
        await self.ensure_loaded()
        slots = self.manager.delete_slot(self.slots, data.get("slotId"))
        await self.commit("delete_slot", slots)

    async def text_change(self, data):
        await self.ensure_loaded()
        slots = self.manager.text_change(self.slots, data.get("slotId"), data.get("content", ""))
        await self.commit("text_change", slots)

    async def class_change(self, data):
        await self.ensure_loaded()
        slots = self.manager.class_change(
            self.slots,
            data.get("slotId"),
            data.get("className", ""),
            data.get("styles"),
            data.get("metadata"),
        )
        await self.commit("class_change", slots)

    async def grid_resize(self, data):
        await self.ensure_loaded()
        slots = self.manager.grid_resize(self.slots, data.get("slotId"), data.get("colSpan", 12))
        await self.commit("grid_resize", slots, debounce=True)

    async def height_resize(self, data):
        await self.ensure_loaded()
        slots = self.manager.height_resize(self.slots, data.get("slotId"), data.get("height", 40))
        await self.commit("height_resize", slots, debounce=True)

    async def save(self, data):
        await self.ensure_loaded()
        configuration = data.get("configuration") or self.configuration
        if not isinstance(configuration, dict) or not isinstance(configuration.get("slots"), dict):
            await self.send_action("error", message="configuration.slots must be an object")
            return
        violations = collect_violations(configuration["slots"], previous=self.slots)
        if violations:
            raise InvalidSlotConfiguration(violations)
        await self.coalescer.flush_now(configuration)
        self.configuration = configuration

    async def publish(self):
        if self.coalescer.pending:
            await self.coalescer.flush_now()
        published = await self.manager.apublish()
        await self.load_draft()
        await broadcast(LayoutChanged(self.store_id, self.page_type), self.channel_name)
        await self.send_action("published", data=published)

    async def reset_layout(self):
        self.coalescer.cancel()
        draft = await self.manager.areset_layout()
        self.configuration = draft["configuration"]
        await broadcast(LayoutChanged(self.store_id, self.page_type), self.channel_name)
        await self.send_action("layout_reset", data=draft)

    # --- Group events ---
    async def layout_changed(self, event):
        if event.get("sender") == self.channel_name:
            return
        if self.drag_guard.active:
            logger.info(f"Ignored reload for {self.room_group_name} during drag")
            return
        # another editor wins: drop unsaved local state
        self.coalescer.cancel()
        draft = await self.load_draft()
        await self.send_action("draft", data=draft, reason="layout_changed")
