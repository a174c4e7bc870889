"""URL configuration for the teams app."""
from django.urls import path

from . import views

app_name = "teams"

urlpatterns = [
    path("", views.board_page, name="board"),
    path("quick/", views.quick_page, name="quick"),
    path("import/", views.import_names, name="import"),
    path("generate/", views.generate_teams, name="generate"),
    path("event/", views.save_event, name="save-event"),
    path("scores/<int:index>/", views.update_score, name="update-score"),
    path("export/", views.export_scores, name="export"),
]
