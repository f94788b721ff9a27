import copy
import logging
import uuid

from .repositioning import find_free_cell, is_descendant
from .resolver import apply_to_template, resolve_template
from .slots import (
    ALIGNMENT_CLASSES,
    CONTAINER_TYPES,
    GRID_COLUMNS,
    INSTANCE_PATTERN,
    PROTECTED_CONTAINERS,
    ROOT_SLOT_ID,
    SLOT_TYPES,
    grid_order,
    timestamp,
    touch,
)

logger = logging.getLogger(__name__)

DEFAULT_CLASS_NAMES = {
    "container": "p-4 border border-gray-200 rounded",
    "text": "text-base text-gray-900",
    "image": "w-full h-auto",
}

PAGE_VIEW_MODES = {
    "cart": ["emptyCart", "withProducts"],
    "category": ["grid", "list"],
    "product": ["default"],
}

# pixels per grid column and per row unit in the editor canvas
COLUMN_WIDTH_PX = 60
ROW_HEIGHT_PX = 40
MAX_CHILD_LEFT_PERCENT = 80
MIN_CHILD_WIDTH_PX = 20


def create_slot(slots, slot_type, content="", parent_id=None, page_type=None, additional=None):
    """Add a user slot. Returns ``(slots, new_id)`` or None."""
    if slot_type not in SLOT_TYPES:
        logger.warning(f"Cannot create slot of unknown type {slot_type!r}")
        return None

    parent_id = resolve_template(parent_id or ROOT_SLOT_ID, slots)
    if parent_id not in slots:
        logger.warning(f"Cannot create slot under missing parent {parent_id}")
        return None

    is_container = slot_type in CONTAINER_TYPES
    full_width = is_container or page_type in ("category", "product")
    now = timestamp()
    new_id = f"new_{slot_type}_{uuid.uuid4().hex[:8]}"

    slot = {
        "id": new_id,
        "type": slot_type,
        "content": content or "",
        "className": DEFAULT_CLASS_NAMES.get(slot_type, ""),
        "parentClassName": "",
        "styles": {"minHeight": "80px"} if is_container else {},
        "parentId": parent_id,
        "position": find_free_cell(slots, parent_id),
        "colSpan": GRID_COLUMNS if full_width else 6,
        "rowSpan": 1,
        "viewMode": list(PAGE_VIEW_MODES.get(page_type, ["default"])),
        "isCustom": True,
        "metadata": {
            "created": now,
            "lastModified": now,
            "hierarchical": True,
        },
    }
    for key, value in (additional or {}).items():
        if key in ("styles", "metadata") and isinstance(value, dict):
            slot[key] = {**slot[key], **value}
        elif key not in ("id", "parentId"):
            slot[key] = value

    updated = copy.deepcopy(slots)
    updated[new_id] = slot
    logger.info(f"Created {slot_type} slot {new_id} under {parent_id}")
    return updated, new_id


def delete_slot(slots, slot_id):
    """Remove a slot with its whole subtree. Protected containers stay."""
    template_id = resolve_template(slot_id, slots)
    if template_id in PROTECTED_CONTAINERS:
        logger.info(f"Refused to delete protected container {template_id}")
        return None
    if template_id not in slots:
        return None

    removed = {template_id}
    removed.update(
        candidate for candidate in slots if is_descendant(slots, template_id, candidate)
    )
    # rendered copies of removed templates go too
    removed.update(
        candidate
        for candidate in slots
        if candidate != resolve_template(candidate, slots)
        and resolve_template(candidate, slots) in removed
    )
    return {
        key: copy.deepcopy(slot) for key, slot in slots.items() if key not in removed
    }


def text_change(slots, slot_id, content):
    def mutate(slot):
        slot["content"] = content
        touch(slot)

    return apply_to_template(slots, slot_id, mutate)


def _split_alignment(class_name):
    classes = (class_name or "").split()
    alignment = [name for name in classes if name in ALIGNMENT_CLASSES]
    others = [name for name in classes if name not in ALIGNMENT_CLASSES]
    return alignment, others


def class_change(slots, slot_id, class_name, styles=None, metadata=None):
    """
    Update classes and styles of a slot.

    Alignment classes are moved onto ``parentClassName``. Styles and
    metadata are merged into what the slot already has.
    """
    alignment, others = _split_alignment(class_name)

    def mutate(slot):
        if alignment:
            _, kept = _split_alignment(slot.get("parentClassName"))
            slot["parentClassName"] = " ".join(kept + alignment[-1:])
            _, existing = _split_alignment(slot.get("className"))
            slot["className"] = " ".join(others) if others else " ".join(existing)
        elif class_name and class_name != slot.get("className"):
            slot["className"] = class_name
        if styles:
            slot["styles"] = {**(slot.get("styles") or {}), **styles}
        if metadata:
            slot["metadata"] = {**(slot.get("metadata") or {}), **metadata}
        touch(slot)

    template_id = resolve_template(slot_id, slots)
    if template_id not in slots:
        if INSTANCE_PATTERN.match(slot_id):
            logger.warning(f"Ignored class change for {slot_id}: template is missing")
            return copy.deepcopy(slots)
        updated = copy.deepcopy(slots)
        updated[slot_id] = {
            "id": slot_id,
            "className": class_name or "",
            "styles": dict(styles or {}),
        }
        return updated

    return apply_to_template(slots, slot_id, mutate)


def _parse_length(value, unit):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if unit == "px" else None
    if isinstance(value, str) and value.endswith(unit):
        try:
            return float(value[: -len(unit)])
        except ValueError:
            return None
    return None


def _constrain_child(child, span):
    styles = dict(child.get("styles") or {})
    left_px = _parse_length(styles.get("left"), "px")
    left_percent = _parse_length(styles.get("left"), "%")
    if left_px is not None:
        styles["left"] = f"{min(MAX_CHILD_LEFT_PERCENT, left_px / 8):g}%"
    elif left_percent is not None and left_percent > MAX_CHILD_LEFT_PERCENT:
        styles["left"] = f"{MAX_CHILD_LEFT_PERCENT}%"

    width_px = _parse_length(styles.get("width"), "px")
    if width_px is not None:
        clamped = max(MIN_CHILD_WIDTH_PX, min(width_px, span * COLUMN_WIDTH_PX))
        styles["width"] = f"{clamped:g}px"
    child["styles"] = styles


def grid_resize(slots, slot_id, col_span):
    span = max(1, min(GRID_COLUMNS, int(col_span)))

    def mutate(slot):
        slot["colSpan"] = span
        touch(slot)

    updated = apply_to_template(slots, slot_id, mutate)
    if updated is None:
        return None

    template_id = resolve_template(slot_id, slots)
    for child in updated.values():
        if child.get("parentId") == template_id and child.get("styles"):
            _constrain_child(child, span)
    return updated


def height_resize(slots, slot_id, height):
    height = int(height)

    def mutate(slot):
        slot["rowSpan"] = max(1, round(height / ROW_HEIGHT_PX))
        slot["styles"] = {**(slot.get("styles") or {}), "minHeight": f"{height}px"}
        touch(slot)

    return apply_to_template(slots, slot_id, mutate)


def filter_by_view_mode(slots, view_mode):
    """Slots visible in ``view_mode``; untagged and ``default`` slots always are."""
    visible = {}
    for slot_id, slot in slots.items():
        modes = slot.get("viewMode") or []
        if not modes or "default" in modes or view_mode in modes:
            visible[slot_id] = slot
    return visible


def sort_by_grid(slots):
    if isinstance(slots, dict):
        slots = slots.values()
    return sorted(slots, key=grid_order)
