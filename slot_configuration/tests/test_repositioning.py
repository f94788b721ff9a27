import copy

from django.test import SimpleTestCase

from slot_configuration.defaults import default_slots
from slot_configuration.repositioning import drop, find_free_cell, is_descendant
from slot_configuration.resolver import project_instances
from slot_configuration.slots import cell
from slot_configuration.validators import validate_slots

from .helpers import hero_row, layout, make_slot


def positions(slots, *slot_ids):
    return [cell(slots[slot_id]) for slot_id in slot_ids]


class FreeCellTests(SimpleTestCase):
    def test_row_major_first_gap(self):
        slots = layout(
            make_slot("box", "content_area", slot_type="container"),
            make_slot("x", "box", 1, 1),
            make_slot("y", "box", 2, 1),
        )
        self.assertEqual(find_free_cell(slots, "box"), {"col": 3, "row": 1})

    def test_full_row_wraps(self):
        children = [make_slot(f"cell{col}", "content_area", col, 1) for col in range(1, 13)]
        slots = layout(*children)
        self.assertEqual(find_free_cell(slots, "content_area"), {"col": 1, "row": 2})
        self.assertEqual(
            find_free_cell(slots, "content_area", exclude="cell5"), {"col": 5, "row": 1}
        )

    def test_is_descendant_through_instances(self):
        slots = project_instances(default_slots("category"), 1)
        self.assertTrue(is_descendant(slots, "product_items", "product_card_price"))
        self.assertTrue(is_descendant(slots, "product_card_template", "product_card_name_0"))
        self.assertFalse(is_descendant(slots, "product_card_price", "product_items"))

    def test_is_descendant_terminates_on_cycles(self):
        slots = layout(
            make_slot("loop_a", "loop_b", slot_type="container"),
            make_slot("loop_b", "loop_a", slot_type="container"),
        )
        self.assertFalse(is_descendant(slots, "content_area", "loop_a"))


class DropRejectionTests(SimpleTestCase):
    def setUp(self):
        self.slots = hero_row()
        self.slots["inner"] = make_slot("inner", "hero", 1, 2, "container")
        self.snapshot = copy.deepcopy(self.slots)

    def assertRejected(self, *args):
        self.assertIsNone(drop(*args, self.slots))
        self.assertEqual(self.slots, self.snapshot)

    def test_drop_inside_own_descendant(self):
        self.assertRejected("hero", "inner", "inside")
        self.assertRejected("content_area", "hero", "inside")
        self.assertRejected("hero", "a", "before")

    def test_drop_onto_itself(self):
        self.assertRejected("a", "a", "after")

    def test_protected_containers_never_move(self):
        for slot_id in ("header_container", "content_area", "sidebar_area", "main_layout"):
            with self.subTest(slot_id=slot_id):
                self.assertRejected(slot_id, "hero", "inside")
                self.assertRejected(slot_id, "title", "after")

    def test_unknown_position_or_slot(self):
        self.assertRejected("a", "b", "over")
        self.assertRejected("a", "nowhere", "inside")
        self.assertRejected("nowhere", "hero", "inside")

    def test_inside_requires_container_target(self):
        self.assertRejected("a", "b", "inside")

    def test_beside_root_is_rejected(self):
        self.assertRejected("title", "main_layout", "before")


class DropInsideTests(SimpleTestCase):
    def test_allocates_first_free_cell(self):
        slots = layout(
            make_slot("box", "content_area", 1, 1, "container"),
            make_slot("x", "box", 1, 1),
            make_slot("y", "box", 2, 1),
            make_slot("z", "sidebar_area", 1, 1),
        )
        result = drop("z", "box", "inside", slots)

        self.assertEqual(result["z"]["parentId"], "box")
        self.assertEqual(result["z"]["position"], {"col": 3, "row": 1})
        self.assertEqual(positions(result, "x", "y"), [(1, 1), (2, 1)])

    def test_preserves_untouched_properties(self):
        slots = hero_row()
        original = copy.deepcopy(slots["title"])
        result = drop("title", "hero", "inside", slots)

        moved = result["title"]
        for key in ("styles", "className", "content", "viewMode", "colSpan", "type"):
            self.assertEqual(moved[key], original[key])
        self.assertIn("lastModified", moved["metadata"])
        self.assertEqual(moved["position"], {"col": 4, "row": 1})
        self.assertEqual(slots["title"], original)

    def test_drop_on_own_parent_moves_to_grandparent(self):
        slots = hero_row()
        result = drop("a", "hero", "inside", slots)

        self.assertEqual(result["a"]["parentId"], "content_area")
        self.assertEqual(result["a"]["position"], {"col": 2, "row": 1})

    def test_instance_ids_move_the_template(self):
        slots = project_instances(default_slots("category"), 3)
        result = drop("product_card_name_2", "product_card_template", "inside", slots)

        self.assertEqual(result["product_card_name"]["parentId"], "product_card_template")
        self.assertEqual(result["product_card_name"]["position"], {"col": 2, "row": 1})
        # the rendered copy is not turned into a standalone slot
        self.assertEqual(result["product_card_name_2"], slots["product_card_name_2"])


class DropBesideSiblingTests(SimpleTestCase):
    def test_before_shifts_every_later_sibling(self):
        slots = hero_row()
        result = drop("title", "a", "before", slots)

        self.assertEqual(result["title"]["parentId"], "hero")
        self.assertEqual(result["title"]["position"], {"col": 1, "row": 1})
        self.assertEqual(positions(result, "a", "b", "c"), [(2, 1), (3, 1), (4, 1)])
        shifted = [
            slot_id for slot_id in ("a", "b", "c")
            if cell(result[slot_id]) != cell(slots[slot_id])
        ]
        self.assertEqual(len(shifted), 3)
        occupied = positions(result, "title", "a", "b", "c")
        self.assertEqual(len(set(occupied)), 4)

    def test_reorder_before_within_parent(self):
        result = drop("c", "a", "before", hero_row())

        self.assertEqual(positions(result, "c", "a", "b"), [(1, 1), (2, 1), (3, 1)])

    def test_reorder_after_within_parent(self):
        result = drop("a", "b", "after", hero_row())

        self.assertEqual(positions(result, "a", "b", "c"), [(3, 1), (2, 1), (4, 1)])

    def test_after_last_column_wraps(self):
        slots = hero_row()
        slots["d"] = make_slot("d", "hero", 12, 1, col_span=1)
        result = drop("a", "d", "after", slots)

        self.assertEqual(result["a"]["position"], {"col": 1, "row": 2})

    def test_after_onto_own_cell_wraps(self):
        slots = hero_row()
        slots["a"]["position"] = {"col": 3, "row": 2}
        slots["b"]["position"] = {"col": 2, "row": 2}
        result = drop("a", "b", "after", slots)

        self.assertEqual(result["a"]["position"], {"col": 1, "row": 3})

    def test_after_foreign_target_uses_its_span(self):
        slots = hero_row()
        result = drop("title", "a", "after", slots)

        self.assertEqual(result["title"]["position"], {"col": 2, "row": 1})
        self.assertEqual(positions(result, "a", "b", "c"), [(1, 1), (3, 1), (4, 1)])

    def test_after_foreign_target_into_free_cell(self):
        slots = hero_row()
        slots["c"]["position"] = {"col": 9, "row": 1}
        slots["b"]["colSpan"] = 6
        result = drop("title", "b", "after", slots)

        self.assertEqual(result["title"]["position"], {"col": 8, "row": 1})
        self.assertEqual(positions(result, "a", "b", "c"), [(1, 1), (2, 1), (9, 1)])

    def test_after_wide_foreign_target_wraps(self):
        slots = hero_row()
        result = drop("a", "title", "after", slots)

        self.assertEqual(result["a"]["parentId"], "header_container")
        self.assertEqual(result["a"]["position"], {"col": 5, "row": 1})

        slots["title"]["colSpan"] = 12
        result = drop("a", "title", "after", slots)
        self.assertEqual(result["a"]["position"], {"col": 1, "row": 2})


class DropOnRepeatedTemplateTests(SimpleTestCase):
    def setUp(self):
        self.slots = default_slots("category")

    def test_before_inserts_at_top_and_pushes_children_down(self):
        result = drop("category_title", "product_card_template", "before", self.slots)

        self.assertEqual(result["category_title"]["parentId"], "product_card_template")
        self.assertEqual(result["category_title"]["position"], {"col": 1, "row": 1})
        self.assertEqual(
            positions(result, "product_card_image", "product_card_content", "add_to_cart_button"),
            [(1, 2), (1, 3), (1, 4)],
        )

    def test_after_appends_below_last_child(self):
        result = drop("category_title", "product_card_template", "after", self.slots)

        self.assertEqual(result["category_title"]["position"], {"col": 1, "row": 4})

    def test_after_on_empty_template(self):
        slots = layout(
            make_slot("product_card_template", "content_area", slot_type="container",
                      metadata={"isTemplate": True}),
            make_slot("promo", "sidebar_area"),
        )
        result = drop("promo", "product_card_template", "after", slots)

        self.assertEqual(result["promo"]["position"], {"col": 1, "row": 1})


class DropSequenceTests(SimpleTestCase):
    def test_invariants_hold_across_gestures(self):
        slots = hero_row()
        gestures = [
            ("title", "a", "before"),
            ("c", "hero", "inside"),
            ("a", "sidebar_area", "inside"),
            ("b", "title", "after"),
            ("hero", "sidebar_area", "inside"),
        ]
        for gesture in gestures:
            result = drop(*gesture, slots)
            self.assertIsNotNone(result, gesture)
            slots = result
            self.assertIsNone(slots["main_layout"]["parentId"])
            self.assertTrue(all(key == slot["id"] for key, slot in slots.items()))
            self.assertTrue(validate_slots(slots))
