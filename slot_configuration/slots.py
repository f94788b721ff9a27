"""
Slot vocabulary shared by the validator, resolver and layout engine.

A slot is a plain JSON object (camelCase keys) stored in a flat mapping
keyed by slot id. Tree structure lives only in ``parentId`` references.
"""

import re

from django.utils import timezone

ROOT_SLOT_ID = "main_layout"

PROTECTED_CONTAINERS = frozenset(
    {"main_layout", "header_container", "content_area", "sidebar_area"}
)

SLOT_TYPES = frozenset({"container", "text", "image", "component", "grid", "flex"})
CONTAINER_TYPES = frozenset({"container", "grid", "flex"})

# Keys a typeless style override may carry
STYLE_OVERRIDE_KEYS = frozenset({"id", "styles", "className", "content"})

ALIGNMENT_CLASSES = ("text-left", "text-center", "text-right")

GRID_COLUMNS = 12
DEFAULT_COL_SPAN = 12
DEFAULT_ROW_SPAN = 1

PRODUCT_CARD_TEMPLATE = "product_card_template"
# Containers whose children are rendered once per item
REPEATED_ITEM_CONTAINERS = frozenset({PRODUCT_CARD_TEMPLATE})

INSTANCE_PATTERN = re.compile(r"^(.+)_(\d+)$")
PRODUCT_CARD_PATTERN = re.compile(r"^product_card_(\d+)$")

PAGE_TYPES = (
    ("product", "Product"),
    ("cart", "Cart"),
    ("category", "Category"),
    ("checkout", "Checkout"),
    ("login", "Login"),
)
PAGE_TYPE_NAMES = tuple(name for name, _ in PAGE_TYPES)


def timestamp():
    return timezone.now().isoformat()


def col_span(slot):
    """Integer column span of a slot; view-mode keyed spans use their first value."""
    span = slot.get("colSpan", DEFAULT_COL_SPAN)
    if isinstance(span, dict):
        for value in span.values():
            if isinstance(value, int) and not isinstance(value, bool):
                return value
        return 1
    if isinstance(span, int) and not isinstance(span, bool):
        return span
    return 1


def cell(slot):
    """``(col, row)`` of a slot or None when it has no usable position."""
    position = slot.get("position")
    if not isinstance(position, dict):
        return None
    col, row = position.get("col"), position.get("row")
    if not isinstance(col, int) or not isinstance(row, int):
        return None
    return col, row


def is_container(slot):
    return slot.get("type") in CONTAINER_TYPES


def children_of(slots, parent_id, exclude=None):
    return [
        slot
        for slot_id, slot in slots.items()
        if slot.get("parentId") == parent_id and slot_id != exclude
    ]


def grid_order(slot):
    """Row-major sort key; unpositioned slots sort last."""
    position = cell(slot)
    if position is None:
        return (float("inf"), float("inf"))
    col, row = position
    return (row, col)


def touch(slot):
    metadata = dict(slot.get("metadata") or {})
    metadata["lastModified"] = timestamp()
    slot["metadata"] = metadata
    return slot
