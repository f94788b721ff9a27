"""Default page layouts used to provision new stores and as load fallbacks."""

import copy


def _slot(slot_id, slot_type, parent_id, col, row, col_span=12, **extra):
    slot = {
        "id": slot_id,
        "type": slot_type,
        "content": "",
        "className": "",
        "parentClassName": "",
        "styles": {},
        "parentId": parent_id,
        "position": {"col": col, "row": row},
        "colSpan": col_span,
        "rowSpan": 1,
        "viewMode": ["default"],
        "metadata": {"hierarchical": True},
    }
    slot.update(extra)
    return slot


def _skeleton(with_sidebar=False):
    slots = [
        _slot("main_layout", "container", None, 1, 1, className="max-w-7xl mx-auto"),
        _slot("header_container", "container", "main_layout", 1, 1),
        _slot("content_area", "container", "main_layout", 1, 2, 9 if with_sidebar else 12),
    ]
    if with_sidebar:
        slots.append(_slot("sidebar_area", "container", "main_layout", 10, 2, 3))
    return slots


def _product():
    return _skeleton(with_sidebar=True) + [
        _slot("product_title", "text", "header_container", 1, 1, content="Product name",
              className="text-3xl font-bold"),
        _slot("product_gallery", "component", "content_area", 1, 1, 6,
              component="ProductGallery"),
        _slot("product_info", "container", "content_area", 7, 1, 6),
        _slot("product_price", "text", "product_info", 1, 1, content="{{product.price}}"),
        _slot("product_description", "text", "product_info", 1, 2,
              content="{{product.description}}"),
        _slot("add_to_cart", "component", "product_info", 1, 3, component="AddToCartButton"),
        _slot("related_products", "component", "sidebar_area", 1, 1,
              component="RelatedProducts"),
    ]


def _cart():
    return _skeleton() + [
        _slot("cart_title", "text", "header_container", 1, 1, content="Your cart",
              className="text-2xl font-semibold"),
        _slot("empty_cart_message", "text", "content_area", 1, 1,
              content="Your cart is empty", viewMode=["emptyCart"]),
        _slot("cart_items", "component", "content_area", 1, 1, 8,
              component="CartItems", viewMode=["withProducts"]),
        _slot("cart_summary", "component", "content_area", 9, 1, 4,
              component="CartSummary", viewMode=["withProducts"]),
    ]


def _category():
    return _skeleton(with_sidebar=True) + [
        _slot("category_title", "text", "header_container", 1, 1,
              content="{{category.name}}", className="text-3xl font-bold"),
        _slot("category_filters", "component", "sidebar_area", 1, 1,
              component="LayeredNavigation"),
        _slot("product_items", "grid", "content_area", 1, 1, viewMode=["grid", "list"]),
        _slot("product_card_template", "container", "product_items", 1, 1, 4,
              metadata={"isTemplate": True, "hierarchical": True}),
        _slot("product_card_image", "image", "product_card_template", 1, 1,
              className="w-full h-auto", metadata={"isTemplate": True}),
        _slot("product_card_content", "container", "product_card_template", 1, 2,
              metadata={"isTemplate": True}),
        _slot("product_card_name", "text", "product_card_content", 1, 1,
              content="{{product.name}}", metadata={"isTemplate": True}),
        _slot("product_card_price_container", "container", "product_card_content", 1, 2,
              metadata={"isTemplate": True}),
        _slot("product_card_price", "text", "product_card_price_container", 1, 1,
              content="{{product.price}}", metadata={"isTemplate": True}),
        _slot("add_to_cart_button", "component", "product_card_template", 1, 3,
              component="AddToCartButton", metadata={"isTemplate": True}),
    ]


def _checkout():
    return _skeleton(with_sidebar=True) + [
        _slot("checkout_title", "text", "header_container", 1, 1, content="Checkout",
              className="text-2xl font-semibold"),
        _slot("shipping_address", "component", "content_area", 1, 1,
              component="ShippingAddressForm"),
        _slot("payment_method", "component", "content_area", 1, 2,
              component="PaymentMethods"),
        _slot("order_summary", "component", "sidebar_area", 1, 1, component="OrderSummary"),
    ]


def _login():
    return _skeleton() + [
        _slot("login_title", "text", "header_container", 1, 1, content="Sign in",
              className="text-2xl font-semibold"),
        _slot("login_form", "component", "content_area", 1, 1, 6, component="LoginForm"),
        _slot("register_form", "component", "content_area", 7, 1, 6,
              component="RegisterForm"),
    ]


_BUILDERS = {
    "product": _product,
    "cart": _cart,
    "category": _category,
    "checkout": _checkout,
    "login": _login,
}


def default_slots(page_type):
    return {slot["id"]: slot for slot in _BUILDERS[page_type]()}


def default_configuration(page_type):
    if page_type not in _BUILDERS:
        raise KeyError(f"No default layout for page type {page_type!r}")
    return {
        "page_name": page_type.title(),
        "slot_type": f"{page_type}_layout",
        "slots": default_slots(page_type),
        "cmsBlocks": [],
        "metadata": {"version": "1.0", "source": "default"},
    }


def fallback_configuration(page_type, reason):
    configuration = copy.deepcopy(default_configuration(page_type))
    configuration["metadata"].update({"fallbackUsed": True, "fallbackReason": reason})
    return configuration
