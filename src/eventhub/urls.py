from django.urls import include, path
from rest_framework import permissions
from drf_yasg.views import get_schema_view
from drf_yasg import openapi
from .settings import DEBUG, SITE_NAME

schema_view = get_schema_view(
    openapi.Info(
        title=f"{SITE_NAME} API",
        default_version="v1",
        description="Event ticketing API: events, tickets, payments, check-in and engagement.",
    ),
    public=True,
    permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    path("api/", include("base.urls")),
    path("api/", include("ticketing.urls")),
    path("api/", include("engagement.urls")),
]

handler404 = "base.views.custom_404_handler"

if DEBUG:
    urlpatterns += [
        path("swagger/", schema_view.with_ui("swagger", cache_timeout=0), name="schema-swagger-ui"),
        path("redoc/", schema_view.with_ui("redoc", cache_timeout=0), name="schema-redoc"),
    ]
