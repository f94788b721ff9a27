from django.urls import path

from store.views import StoreListCreateView, StoreRetrieveView

urlpatterns = [
    path("stores/", StoreListCreateView.as_view(), name="store-list-create"),
    path("stores/<int:pk>/", StoreRetrieveView.as_view(), name="store-detail"),
]
