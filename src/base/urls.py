from django.urls import path
from rest_framework import routers
from base.views import (
    TeamMemberAdminViewSet,
    AuthViewSet,
    NotificationViewSet,
    RootView,
    HealthCheckView,
)


router = routers.DefaultRouter()
router.register(r"admin/team", TeamMemberAdminViewSet, basename="team-admin")
router.register(r"auth", AuthViewSet, basename="auth")
router.register(r"notifications", NotificationViewSet, basename="notifications")

urlpatterns = [
    path("", RootView.as_view(), name="root"),
    path("healthz/", HealthCheckView.as_view(), name="health-check"),
] + router.urls
