"""
URL configuration for team_platform project.

The team shuffle app is mounted at the site root.
"""
from django.urls import include, path

urlpatterns = [
    path('', include('teams.urls')),
]
