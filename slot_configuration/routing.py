from django.urls import path

from . import consumers

websocket_urlpatterns = [
    path(
        "ws/layouts/<int:store_id>/<str:page_type>/",
        consumers.LayoutEditorConsumer.as_asgi(),
    ),
]
