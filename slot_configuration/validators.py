import logging
from dataclasses import asdict, dataclass
from typing import Optional

from .slots import (
    GRID_COLUMNS,
    INSTANCE_PATTERN,
    PRODUCT_CARD_PATTERN,
    PRODUCT_CARD_TEMPLATE,
    PROTECTED_CONTAINERS,
    ROOT_SLOT_ID,
    SLOT_TYPES,
    STYLE_OVERRIDE_KEYS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotViolation:
    slot_id: Optional[str]
    rule: str
    message: str

    def as_dict(self):
        return asdict(self)


def _is_style_override(slot):
    return "styles" in slot and set(slot).issubset(STYLE_OVERRIDE_KEYS)


def _parent_resolves(parent_id, slot, slots):
    if parent_id in slots:
        return True
    match = INSTANCE_PATTERN.match(parent_id)
    if match and match.group(1) in slots:
        return True
    if PRODUCT_CARD_PATTERN.match(parent_id) or parent_id == PRODUCT_CARD_TEMPLATE:
        return True
    return bool((slot.get("metadata") or {}).get("isTemplate"))


def _check_slot(slot_id, slot, slots):
    if not isinstance(slot, dict):
        yield SlotViolation(slot_id, "malformed", "slot is not an object")
        return

    if slot.get("id") != slot_id:
        yield SlotViolation(
            slot_id, "key_mismatch", f"key {slot_id!r} holds slot id {slot.get('id')!r}"
        )

    slot_type = slot.get("type")
    if slot_type is None:
        if not _is_style_override(slot):
            yield SlotViolation(slot_id, "missing_type", "slot has no type")
    elif slot_type not in SLOT_TYPES:
        logger.warning(f"Slot {slot_id} has unrecognised type {slot_type!r}")

    parent_id = slot.get("parentId")
    if slot_id == ROOT_SLOT_ID and parent_id is not None:
        yield SlotViolation(slot_id, "root_parent", "main_layout must not have a parent")
    elif parent_id is not None and not _parent_resolves(parent_id, slot, slots):
        yield SlotViolation(
            slot_id, "dangling_parent", f"parent {parent_id!r} does not exist"
        )

    if "viewMode" in slot and not isinstance(slot["viewMode"], (list, tuple)):
        yield SlotViolation(slot_id, "view_mode", "viewMode must be a list")

    position = slot.get("position")
    if position is not None:
        col = position.get("col") if isinstance(position, dict) else None
        row = position.get("row") if isinstance(position, dict) else None
        valid = (
            isinstance(col, int)
            and isinstance(row, int)
            and 1 <= col <= GRID_COLUMNS
            and row >= 1
        )
        if not valid:
            yield SlotViolation(slot_id, "position", f"invalid grid position {position!r}")


def collect_violations(slots, previous=None):
    """
    Check a slot mapping against the structural invariants.

    When ``previous`` is given, protected containers present there must
    still exist with the same parent.
    """
    if not isinstance(slots, dict):
        return [SlotViolation(None, "malformed", "slots must be a mapping")]

    violations = []
    for slot_id, slot in slots.items():
        violations.extend(_check_slot(slot_id, slot, slots))

    if previous:
        for slot_id in sorted(PROTECTED_CONTAINERS):
            before = previous.get(slot_id)
            if before is None:
                continue
            after = slots.get(slot_id)
            if after is None:
                violations.append(
                    SlotViolation(slot_id, "protected_container", "protected container was removed")
                )
            elif after.get("parentId") != before.get("parentId"):
                violations.append(
                    SlotViolation(slot_id, "protected_container", "protected container was reparented")
                )
    return violations


def validate_slots(slots, previous=None):
    violations = collect_violations(slots, previous=previous)
    for violation in violations:
        logger.error(
            f"Slot validation failed [{violation.rule}] {violation.slot_id}: {violation.message}"
        )
    return not violations
