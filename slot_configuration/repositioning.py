"""
Drag and drop repositioning on the 12-column slot grid.

All placement uses row-major order (ascending row, then column), both to
find the first free cell and to decide which siblings shift on insert.
``drop`` never mutates its input; it returns a new mapping or None when
the gesture is rejected.
"""

import copy
import logging

from .resolver import resolve_template
from .slots import (
    GRID_COLUMNS,
    PROTECTED_CONTAINERS,
    REPEATED_ITEM_CONTAINERS,
    cell,
    children_of,
    col_span,
    is_container,
    touch,
)
from .validators import validate_slots

logger = logging.getLogger(__name__)

DROP_POSITIONS = ("inside", "before", "after")


def _effective_parent(slots, slot):
    parent_id = slot.get("parentId")
    if parent_id is None:
        return None
    return resolve_template(parent_id, slots)


def is_descendant(slots, ancestor_id, slot_id):
    """True when ``slot_id`` sits anywhere below ``ancestor_id``."""
    visited = set()
    current = slots.get(slot_id)
    while current is not None:
        parent_id = current.get("parentId")
        if parent_id is None or parent_id in visited:
            return False
        effective = resolve_template(parent_id, slots)
        if ancestor_id in (parent_id, effective):
            return True
        visited.update((parent_id, effective))
        current = slots.get(parent_id) or slots.get(effective)
    return False


def find_free_cell(slots, parent_id, exclude=None):
    occupied = {
        cell(sibling)
        for sibling in children_of(slots, parent_id, exclude=exclude)
    }
    row = 1
    while True:
        for col in range(1, GRID_COLUMNS + 1):
            if (col, row) not in occupied:
                return {"col": col, "row": row}
        row += 1


def _next_cell(col, row):
    if col >= GRID_COLUMNS:
        return {"col": 1, "row": row + 1}
    return {"col": col + 1, "row": row}


def _is_occupied(slots, parent_id, position, exclude):
    target = (position["col"], position["row"])
    return any(
        cell(sibling) == target
        for sibling in children_of(slots, parent_id, exclude=exclude)
    )


def shift_siblings(slots, parent_id, position, exclude):
    """Move every sibling at or past ``position`` forward one cell, in place."""
    insert_at = (position["row"], position["col"])
    shifted = []
    for slot_id, sibling in slots.items():
        if slot_id == exclude or sibling.get("parentId") != parent_id:
            continue
        current = cell(sibling)
        if current is None:
            continue
        col, row = current
        if (row, col) >= insert_at:
            sibling["position"] = _next_cell(col, row)
            shifted.append(slot_id)
    return shifted


def _place_inside(slots, dragged, target_id):
    target = slots[target_id]
    if not is_container(target):
        return None

    if _effective_parent(slots, dragged) == target_id:
        # dropped back onto its own container: move up one level
        grandparent_id = _effective_parent(slots, target)
        if grandparent_id is None or grandparent_id not in slots:
            return None
        return grandparent_id, find_free_cell(slots, grandparent_id, exclude=dragged["id"])

    return target_id, find_free_cell(slots, target_id, exclude=dragged["id"])


def _place_in_template(slots, dragged, template_id, drop_position):
    dragged_id = dragged["id"]
    children = children_of(slots, template_id, exclude=dragged_id)
    if drop_position == "before":
        for child in children:
            position = cell(child)
            if position is not None:
                child["position"] = {"col": position[0], "row": position[1] + 1}
        return template_id, {"col": 1, "row": 1}

    rows = [cell(child)[1] for child in children if cell(child) is not None]
    return template_id, {"col": 1, "row": max(rows, default=0) + 1}


def _place_beside_sibling(slots, dragged, target, parent_id, drop_position):
    target_col, target_row = cell(target) or (1, 1)
    if drop_position == "before":
        position = {"col": target_col, "row": target_row}
    else:
        position = {"col": target_col + 1, "row": target_row}
        if position["col"] > GRID_COLUMNS or cell(dragged) == (position["col"], position["row"]):
            position = {"col": 1, "row": target_row + 1}
    shift_siblings(slots, parent_id, position, exclude=dragged["id"])
    return parent_id, position


def _place_beside_foreign(slots, dragged, target, drop_position):
    parent_id = _effective_parent(slots, target)
    if parent_id is None or parent_id not in slots:
        return None
    target_col, target_row = cell(target) or (1, 1)
    if drop_position == "before":
        position = {"col": 1, "row": target_row}
    else:
        position = {"col": target_col + col_span(target), "row": target_row}
        if position["col"] > GRID_COLUMNS:
            position = {"col": 1, "row": target_row + 1}
    if _is_occupied(slots, parent_id, position, exclude=dragged["id"]):
        shift_siblings(slots, parent_id, position, exclude=dragged["id"])
    return parent_id, position


def drop(dragged_id, target_id, drop_position, slots):
    """
    Move ``dragged_id`` relative to ``target_id``.

    ``drop_position`` is one of ``inside``, ``before`` or ``after``.
    Instance ids are resolved to their templates first. Returns the new
    slot mapping, or None when the move is not allowed.
    """
    if drop_position not in DROP_POSITIONS:
        logger.warning(f"Rejected drop with unknown position {drop_position!r}")
        return None
    if dragged_id == target_id:
        return None

    effective_dragged = resolve_template(dragged_id, slots)
    effective_target = resolve_template(target_id, slots)

    if dragged_id in PROTECTED_CONTAINERS or effective_dragged in PROTECTED_CONTAINERS:
        logger.info(f"Rejected drop of protected container {effective_dragged}")
        return None
    if effective_dragged not in slots or effective_target not in slots:
        logger.warning(f"Rejected drop of {dragged_id} onto unknown slot {target_id}")
        return None
    if effective_dragged == effective_target:
        return None
    if is_descendant(slots, effective_dragged, effective_target):
        logger.info(f"Rejected drop of {effective_dragged} into its own descendant {effective_target}")
        return None

    updated = copy.deepcopy(slots)
    dragged = updated[effective_dragged]
    target = updated[effective_target]

    if drop_position == "inside":
        placement = _place_inside(updated, dragged, effective_target)
    elif effective_target in REPEATED_ITEM_CONTAINERS:
        placement = _place_in_template(updated, dragged, effective_target, drop_position)
    elif _effective_parent(updated, dragged) == _effective_parent(updated, target):
        placement = _place_beside_sibling(
            updated, dragged, target, _effective_parent(updated, target), drop_position
        )
    else:
        placement = _place_beside_foreign(updated, dragged, target, drop_position)

    if placement is None:
        return None

    parent_id, position = placement
    dragged["parentId"] = parent_id
    dragged["position"] = position
    touch(dragged)

    if not validate_slots(updated, previous=slots):
        return None
    return updated
