from django.urls import path

from . import views

urlpatterns = [
    # 📝 Draft lifecycle
    path(
        "slot-configurations/draft/<int:store_id>/<str:page_type>/",
        views.DraftView.as_view(),
        name="slot-draft",
    ),
    path(
        "slot-configurations/publish/<int:store_id>/<str:page_type>/",
        views.PublishView.as_view(),
        name="slot-publish",
    ),
    path(
        "slot-configurations/reset/<int:store_id>/<str:page_type>/",
        views.ResetLayoutView.as_view(),
        name="slot-reset",
    ),
    path(
        "slot-configurations/published/<int:store_id>/<str:page_type>/",
        views.PublishedLayoutView.as_view(),
        name="slot-published",
    ),
    path(
        "slot-configurations/destroy/<int:store_id>/<str:page_type>/",
        views.DestroyLayoutView.as_view(),
        name="slot-destroy",
    ),
    path(
        "slot-configurations/<int:store_id>/<str:page_type>/slot/<str:slot_id>/",
        views.PublishedSlotPatchView.as_view(),
        name="slot-published-patch",
    ),
    # 🕘 History
    path(
        "slot-configurations/history/<int:store_id>/<str:page_type>/",
        views.VersionHistoryView.as_view(),
        name="slot-history",
    ),
    path(
        "slot-configurations/create-draft-from-published/",
        views.CreateDraftFromPublishedView.as_view(),
        name="slot-create-draft-from-published",
    ),
    path(
        "slot-configurations/revert-draft/<int:version_id>/",
        views.RevertDraftView.as_view(),
        name="slot-revert-draft",
    ),
    path(
        "slot-configurations/undo-revert/<int:draft_id>/",
        views.UndoRevertView.as_view(),
        name="slot-undo-revert",
    ),
    # 🏬 Store wide
    path(
        "slot-configurations/unpublished-status/<int:store_id>/",
        views.UnpublishedStatusView.as_view(),
        name="slot-unpublished-status",
    ),
    path(
        "slot-configurations/publish-all/<int:store_id>/",
        views.PublishAllView.as_view(),
        name="slot-publish-all",
    ),
    path(
        "slot-configurations/defaults/<str:page_type>/",
        views.DefaultLayoutView.as_view(),
        name="slot-defaults",
    ),
]
