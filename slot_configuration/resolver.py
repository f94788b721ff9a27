"""
Template/instance resolution.

Repeated items (product cards) are rendered from one template subtree.
A rendered copy carries the template id plus an ordinal suffix, e.g.
``product_card_name_3``. Instances are projections only: every mutation
is applied to the template and at most mirrored onto an instance that is
already present in the map.
"""

import copy
import logging

from .slots import (
    INSTANCE_PATTERN,
    PRODUCT_CARD_PATTERN,
    PRODUCT_CARD_TEMPLATE,
    REPEATED_ITEM_CONTAINERS,
)

logger = logging.getLogger(__name__)


def resolve_template(slot_id, slots):
    if PRODUCT_CARD_PATTERN.match(slot_id):
        return PRODUCT_CARD_TEMPLATE
    match = INSTANCE_PATTERN.match(slot_id)
    if match and match.group(1) in slots:
        return match.group(1)
    return slot_id


def lookup(slots, slot_id):
    """Slot for an id, falling back to its template."""
    if slot_id in slots:
        return slots[slot_id]
    return slots.get(resolve_template(slot_id, slots))


def apply_to_template(slots, slot_id, mutate):
    """
    Apply ``mutate`` to the template behind ``slot_id``.

    ``mutate`` receives a copy of the slot and edits it in place. When
    ``slot_id`` is an instance that currently exists in the map the same
    mutation is mirrored onto it; instances are never created. Returns a
    new mapping, or None when no template exists.
    """
    template_id = resolve_template(slot_id, slots)
    if template_id not in slots:
        logger.warning(f"No template slot found for {slot_id}")
        return None

    updated = copy.deepcopy(slots)
    mutate(updated[template_id])
    if slot_id != template_id and slot_id in updated:
        mutate(updated[slot_id])
    return updated


def _inside_repeated_container(slot_id, slots):
    visited = set()
    current = slot_id
    while current is not None and current not in visited:
        if current in REPEATED_ITEM_CONTAINERS:
            return True
        visited.add(current)
        slot = slots.get(current)
        current = slot.get("parentId") if slot else None
    return False


def is_repeated_instance(slot_id, slots):
    if slot_id in REPEATED_ITEM_CONTAINERS:
        return False
    if PRODUCT_CARD_PATTERN.match(slot_id):
        return True
    match = INSTANCE_PATTERN.match(slot_id)
    if not match or match.group(1) not in slots:
        return False
    return _inside_repeated_container(match.group(1), slots)


def strip_instances(slots):
    kept = {
        slot_id: slot
        for slot_id, slot in slots.items()
        if not is_repeated_instance(slot_id, slots)
    }
    dropped = len(slots) - len(kept)
    if dropped:
        logger.info(f"Filtered {dropped} repeated-item instances before save")
    return kept


def _instance_id(slot_id, ordinal):
    if slot_id == PRODUCT_CARD_TEMPLATE:
        return f"product_card_{ordinal}"
    return f"{slot_id}_{ordinal}"


def project_instances(slots, count):
    """Slot map with ``count`` rendered copies of every repeated-item subtree."""
    template_ids = [
        slot_id
        for slot_id in slots
        if not is_repeated_instance(slot_id, slots)
        and _inside_repeated_container(slot_id, slots)
    ]
    projected = copy.deepcopy(slots)
    for ordinal in range(count):
        for template_id in template_ids:
            instance = copy.deepcopy(slots[template_id])
            instance["id"] = _instance_id(template_id, ordinal)
            parent_id = instance.get("parentId")
            if template_id not in REPEATED_ITEM_CONTAINERS and parent_id is not None:
                instance["parentId"] = _instance_id(parent_id, ordinal)
            metadata = dict(instance.get("metadata") or {})
            metadata["isTemplate"] = False
            metadata["instanceOf"] = template_id
            instance["metadata"] = metadata
            projected[instance["id"]] = instance
    return projected
