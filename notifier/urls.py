from django.urls import path
from . import views

urlpatterns = [
    # Health check
    path("health", views.health, name="health"),

    # Document-created events from an external trigger runtime
    path("events/<str:collection>", views.event, name="event"),
]
