from django.conf import settings

DEFAULTS = {
    "SAVE_DEBOUNCE_SECONDS": 0.5,
    "DRAG_GRACE_SECONDS": 2.0,
    "HISTORY_LIMIT": 20,
}


def editor_setting(name):
    """Read one SLOT_EDITOR key, falling back to the built-in default."""
    overrides = getattr(settings, "SLOT_EDITOR", None) or {}
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
