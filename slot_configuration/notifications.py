"""Cross-editor change notifications over the Channels layer."""

from dataclasses import dataclass

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

LAYOUT_CHANGED = "layout.changed"


@dataclass(frozen=True)
class LayoutChanged:
    store_id: int
    page_type: str

    @property
    def group_name(self):
        return layout_group_name(self.store_id, self.page_type)

    def as_message(self):
        return {"storeId": self.store_id, "pageType": self.page_type}

    @classmethod
    def from_message(cls, message):
        return cls(store_id=message["storeId"], page_type=message["pageType"])


def layout_group_name(store_id, page_type):
    return f"layout_{store_id}_{page_type}"


async def broadcast(event, sender=None):
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    await channel_layer.group_send(
        event.group_name,
        {"type": LAYOUT_CHANGED, "sender": sender, **event.as_message()},
    )


def notify_layout_changed(store_id, page_type, sender=None):
    """Tell every open editor of this page to reload its draft."""
    async_to_sync(broadcast)(LayoutChanged(store_id, page_type), sender)
