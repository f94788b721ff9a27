import copy

from django.test import SimpleTestCase

from slot_configuration.defaults import default_slots
from slot_configuration.operations import (
    class_change,
    create_slot,
    delete_slot,
    filter_by_view_mode,
    grid_resize,
    height_resize,
    sort_by_grid,
    text_change,
)
from slot_configuration.resolver import project_instances, strip_instances
from slot_configuration.validators import validate_slots

from .helpers import hero_row, layout, make_slot


class CreateSlotTests(SimpleTestCase):
    def test_container_defaults(self):
        slots = hero_row()
        updated, slot_id = create_slot(slots, "container", parent_id="hero")

        slot = updated[slot_id]
        self.assertTrue(slot_id.startswith("new_container_"))
        self.assertEqual(slot["parentId"], "hero")
        self.assertEqual(slot["position"], {"col": 4, "row": 1})
        self.assertEqual(slot["colSpan"], 12)
        self.assertEqual(slot["className"], "p-4 border border-gray-200 rounded")
        self.assertEqual(slot["styles"], {"minHeight": "80px"})
        self.assertTrue(slot["isCustom"])
        self.assertIn("created", slot["metadata"])
        self.assertNotIn(slot_id, slots)
        self.assertTrue(validate_slots(updated))

    def test_text_defaults_to_half_width_on_main_layout(self):
        updated, slot_id = create_slot(layout(), "text", content="Hello")

        slot = updated[slot_id]
        self.assertEqual(slot["parentId"], "main_layout")
        self.assertEqual(slot["colSpan"], 6)
        self.assertEqual(slot["content"], "Hello")
        self.assertEqual(slot["className"], "text-base text-gray-900")
        self.assertEqual(slot["viewMode"], ["default"])

    def test_page_type_defaults(self):
        cart, cart_id = create_slot(layout(), "image", page_type="cart")
        self.assertEqual(cart[cart_id]["viewMode"], ["emptyCart", "withProducts"])
        self.assertEqual(cart[cart_id]["colSpan"], 6)

        category, category_id = create_slot(layout(), "text", page_type="category")
        self.assertEqual(category[category_id]["viewMode"], ["grid", "list"])
        self.assertEqual(category[category_id]["colSpan"], 12)

    def test_additional_properties(self):
        updated, slot_id = create_slot(
            layout(),
            "component",
            additional={"component": "Newsletter", "styles": {"padding": "8px"}, "id": "x"},
        )
        self.assertEqual(updated[slot_id]["component"], "Newsletter")
        self.assertEqual(updated[slot_id]["styles"], {"padding": "8px"})
        self.assertEqual(updated[slot_id]["id"], slot_id)

    def test_instance_parent_resolves_to_template(self):
        slots = default_slots("category")
        updated, slot_id = create_slot(slots, "text", parent_id="product_card_content_2")
        self.assertEqual(updated[slot_id]["parentId"], "product_card_content")

    def test_rejected_inputs(self):
        self.assertIsNone(create_slot(layout(), "video"))
        self.assertIsNone(create_slot(layout(), "text", parent_id="missing"))


class DeleteSlotTests(SimpleTestCase):
    def test_removes_subtree(self):
        slots = hero_row()
        updated = delete_slot(slots, "hero")

        for slot_id in ("hero", "a", "b", "c"):
            self.assertNotIn(slot_id, updated)
        self.assertIn("title", updated)
        self.assertIn("hero", slots)

    def test_protected_containers_stay(self):
        self.assertIsNone(delete_slot(hero_row(), "content_area"))
        self.assertIsNone(delete_slot(hero_row(), "main_layout"))

    def test_instance_deletes_template_and_copies(self):
        slots = project_instances(default_slots("category"), 2)
        updated = delete_slot(slots, "product_card_price_container_1")

        for slot_id in (
            "product_card_price_container",
            "product_card_price",
            "product_card_price_container_0",
            "product_card_price_1",
        ):
            self.assertNotIn(slot_id, updated)
        self.assertIn("product_card_name", updated)
        self.assertTrue(validate_slots(updated))

    def test_missing_slot(self):
        self.assertIsNone(delete_slot(layout(), "ghost"))


class TextAndClassChangeTests(SimpleTestCase):
    def test_text_change_on_instance_updates_template(self):
        slots = default_slots("category")
        updated = text_change(slots, "product_card_name_4", "{{product.title}}")

        self.assertEqual(updated["product_card_name"]["content"], "{{product.title}}")
        self.assertNotIn("product_card_name_4", updated)

    def test_alignment_moves_to_parent_class(self):
        slots = hero_row()
        slots["title"]["parentClassName"] = "flex text-left"
        updated = class_change(slots, "title", "text-center font-bold")

        self.assertEqual(updated["title"]["parentClassName"], "flex text-center")
        self.assertEqual(updated["title"]["className"], "font-bold")

    def test_alignment_only_keeps_element_classes(self):
        updated = class_change(hero_row(), "title", "text-right")

        self.assertEqual(updated["title"]["className"], "text-xl")
        self.assertEqual(updated["title"]["parentClassName"], "text-right")

    def test_empty_class_name_keeps_existing(self):
        updated = class_change(hero_row(), "title", "", styles={"fontSize": "20px"})

        self.assertEqual(updated["title"]["className"], "text-xl")
        self.assertEqual(updated["title"]["styles"], {"color": "red", "fontSize": "20px"})

    def test_metadata_is_merged(self):
        updated = class_change(hero_row(), "title", "text-2xl", metadata={"source": "toolbar"})

        self.assertEqual(updated["title"]["className"], "text-2xl")
        self.assertEqual(updated["title"]["metadata"]["source"], "toolbar")
        self.assertIn("lastModified", updated["title"]["metadata"])

    def test_class_change_mirrors_onto_rendered_instance(self):
        slots = project_instances(default_slots("category"), 2)
        updated = class_change(slots, "product_card_price_1", "text-red-600")

        self.assertEqual(updated["product_card_price"]["className"], "text-red-600")
        self.assertEqual(updated["product_card_price_1"]["className"], "text-red-600")

    def test_unknown_slot_becomes_style_override(self):
        updated = class_change(layout(), "hero_banner", "bg-black", styles={"color": "white"})

        self.assertEqual(
            updated["hero_banner"],
            {"id": "hero_banner", "className": "bg-black", "styles": {"color": "white"}},
        )
        self.assertTrue(validate_slots(updated))

    def test_instance_without_template_is_ignored(self):
        slots = layout()
        updated = class_change(slots, "banner_3", "bg-black")
        self.assertEqual(updated, slots)


class ResizeTests(SimpleTestCase):
    def test_resizing_an_instance_resizes_its_template(self):
        slots = default_slots("category")
        updated = grid_resize(slots, "product_card_name_3", 6)

        self.assertEqual(updated["product_card_name"]["colSpan"], 6)
        self.assertNotIn("product_card_name_3", updated)
        self.assertNotIn("product_card_name_3", strip_instances(updated))

    def test_span_is_clamped(self):
        slots = hero_row()
        self.assertEqual(grid_resize(slots, "a", 20)["a"]["colSpan"], 12)
        self.assertEqual(grid_resize(slots, "a", 0)["a"]["colSpan"], 1)

    def test_children_are_kept_inside_the_container(self):
        slots = layout(
            make_slot("panel", "content_area", slot_type="container"),
            make_slot("left_px", "panel", styles={"left": "400px", "width": "1000px"}),
            make_slot("far_px", "panel", 2, 1, styles={"left": "800px", "width": "10px"}),
            make_slot("far_percent", "panel", 3, 1, styles={"left": "95%"}),
            make_slot("fine", "panel", 4, 1, styles={"left": "25%", "width": "100px"}),
        )
        updated = grid_resize(slots, "panel", 6)

        self.assertEqual(updated["left_px"]["styles"], {"left": "50%", "width": "360px"})
        self.assertEqual(updated["far_px"]["styles"], {"left": "80%", "width": "20px"})
        self.assertEqual(updated["far_percent"]["styles"], {"left": "80%"})
        self.assertEqual(updated["fine"]["styles"], {"left": "25%", "width": "100px"})

    def test_height_resize(self):
        updated = height_resize(hero_row(), "title", 120)
        self.assertEqual(updated["title"]["rowSpan"], 3)
        self.assertEqual(updated["title"]["styles"], {"color": "red", "minHeight": "120px"})

        self.assertEqual(height_resize(hero_row(), "title", 10)["title"]["rowSpan"], 1)

    def test_missing_slot(self):
        self.assertIsNone(grid_resize(layout(), "ghost", 4))


class ViewHelpersTests(SimpleTestCase):
    def test_filter_by_view_mode(self):
        slots = default_slots("cart")
        empty = filter_by_view_mode(slots, "emptyCart")

        self.assertIn("empty_cart_message", empty)
        self.assertNotIn("cart_items", empty)
        self.assertIn("main_layout", empty)
        self.assertIn("cart_items", filter_by_view_mode(slots, "withProducts"))

    def test_untagged_slots_are_always_visible(self):
        slots = {"plain": {"id": "plain", "type": "text"}}
        self.assertEqual(filter_by_view_mode(slots, "list"), slots)

    def test_sort_by_grid(self):
        slots = hero_row()
        slots["a"]["position"] = {"col": 5, "row": 2}
        hero_children = {k: v for k, v in slots.items() if v["parentId"] == "hero"}
        ordered = [slot["id"] for slot in sort_by_grid(hero_children)]
        self.assertEqual(ordered, ["b", "c", "a"])

    def test_invariants_hold_across_operations(self):
        slots = copy.deepcopy(default_slots("product"))
        slots, new_id = create_slot(slots, "container", parent_id="content_area", page_type="product")
        slots = text_change(slots, "product_title", "Headphones")
        slots = class_change(slots, new_id, "text-center bg-white")
        slots = grid_resize(slots, new_id, 8)
        slots = height_resize(slots, new_id, 200)
        slots = delete_slot(slots, "related_products")

        self.assertIsNone(slots["main_layout"]["parentId"])
        self.assertTrue(all(key == slot["id"] for key, slot in slots.items()))
        self.assertTrue(validate_slots(slots))
