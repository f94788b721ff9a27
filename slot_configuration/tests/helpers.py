def make_slot(slot_id, parent_id="main_layout", col=1, row=1, slot_type="text", col_span=12, **extra):
    slot = {
        "id": slot_id,
        "type": slot_type,
        "content": "",
        "className": "",
        "styles": {},
        "parentId": parent_id,
        "position": {"col": col, "row": row},
        "colSpan": col_span,
        "rowSpan": 1,
        "viewMode": ["default"],
        "metadata": {},
    }
    slot.update(extra)
    return slot


def layout(*slots):
    """Protected skeleton plus the given slots, keyed by id."""
    skeleton = [
        make_slot("main_layout", None, slot_type="container"),
        make_slot("header_container", "main_layout", 1, 1, "container"),
        make_slot("content_area", "main_layout", 1, 2, "container", 9),
        make_slot("sidebar_area", "main_layout", 10, 2, "container", 3),
    ]
    return {slot["id"]: slot for slot in skeleton + list(slots)}


def hero_row():
    """A container in the content area holding three one-column texts."""
    return layout(
        make_slot("hero", "content_area", 1, 1, "container"),
        make_slot("a", "hero", 1, 1, col_span=1),
        make_slot("b", "hero", 2, 1, col_span=1),
        make_slot("c", "hero", 3, 1, col_span=1),
        make_slot("title", "header_container", 1, 1, col_span=4, styles={"color": "red"},
                  className="text-xl", content="Welcome", viewMode=["grid"]),
    )
