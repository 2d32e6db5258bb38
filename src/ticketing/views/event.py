import logging
from django.core.exceptions import ValidationError
from django.http import HttpResponse
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from rest_framework.response import Response
from base.helpers.api_permissions import AdminPermission, StaffPermission
from base.helpers.errors import ModelValidationMixin, error_message
from ticketing.models import Event, Festival
from ticketing.filters.event import EventFilter
from ticketing.serializers.event import (
    EventListedSerializer,
    EventDetailSerializer,
    AdminEventSerializer,
    FestivalSerializer,
    AdminFestivalSerializer,
)
from ticketing.services.calendar import generate_ics, google_calendar_url, ics_filename
from ticketing.services.importer import import_attendees
from ticketing.services.report import build_event_report, report_to_csv

logger = logging.getLogger(__name__)


class EventViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = EventListedSerializer
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = EventFilter
    ordering_fields = ["date", "price"]
    ordering = ["date", "start_time"]

    def get_serializer_class(self):
        if self.action == "retrieve":
            return EventDetailSerializer
        return EventListedSerializer

    def get_queryset(self):
        # Fix for swagger schema generation
        if getattr(self, "swagger_fake_view", False):
            return Event.objects.none()
        return Event.get_active_qs()

    @swagger_auto_schema(
        operation_description="Download the event as an iCalendar (.ics) file.",
        responses={200: "text/calendar"},
    )
    @action(detail=True, methods=["get"])
    def calendar(self, request, *args, **kwargs):
        event = self.get_object()
        response = HttpResponse(generate_ics(event), content_type="text/calendar; charset=utf-8")
        response["Content-Disposition"] = f'attachment; filename="{ics_filename(event)}"'
        return response

    @swagger_auto_schema(operation_description="Google Calendar link for the event.")
    @action(detail=True, methods=["get"])
    def google_calendar(self, request, *args, **kwargs):
        event = self.get_object()
        return Response({"url": google_calendar_url(event)})


class FestivalViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = FestivalSerializer

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Festival.objects.none()
        return Festival.get_active_qs()


# Admin ViewSets


class AdminEventViewSet(ModelValidationMixin, viewsets.ModelViewSet):
    queryset = Event.objects.all()
    serializer_class = AdminEventSerializer
    permission_classes = [AdminPermission]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = EventFilter
    ordering_fields = ["date", "created_at", "sold_count"]
    ordering = ["date", "start_time"]

    def get_permissions(self):
        # Staff can look at events and their attendees, only managers edit them.
        if self.action in ("list", "retrieve", "report"):
            return [StaffPermission()]
        return super().get_permissions()

    @swagger_auto_schema(
        operation_description="Copy an event. The copy starts with no tickets sold.",
        request_body=openapi.Schema(type=openapi.TYPE_OBJECT, properties={}),
        responses={201: AdminEventSerializer()},
    )
    @action(detail=True, methods=["post"])
    def duplicate(self, request, *args, **kwargs):
        event = self.get_object()
        copy = event.duplicate()
        logger.info("Event %s duplicated as %s", event.event_id, copy.event_id)
        return Response(AdminEventSerializer(copy).data, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(
        operation_description="Sales and attendance report. Use format=csv for a CSV download.",
        manual_parameters=[
            openapi.Parameter(
                "format",
                openapi.IN_QUERY,
                description="json (default) or csv",
                type=openapi.TYPE_STRING,
            ),
        ],
    )
    @action(detail=True, methods=["get"])
    def report(self, request, *args, **kwargs):
        event = self.get_object()
        report = build_event_report(event)
        if request.query_params.get("format") == "csv":
            response = HttpResponse(report_to_csv(report), content_type="text/csv")
            response["Content-Disposition"] = (
                f'attachment; filename="report-{event.event_id}.csv"'
            )
            return response
        return Response(report)

    @swagger_auto_schema(
        operation_description="""
        Import attendees from CSV text (csv_data) or an uploaded file (file).
        Recognised headers: name/full name/attendee, email/e-mail/mail, phone/mobile/contact.
        """,
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={"csv_data": openapi.Schema(type=openapi.TYPE_STRING)},
        ),
    )
    @action(detail=True, methods=["post"])
    def import_attendees(self, request, *args, **kwargs):
        event = self.get_object()
        csv_data = request.data.get("csv_data")
        upload = request.FILES.get("file")
        if upload is not None:
            csv_data = upload.read().decode("utf-8-sig", errors="replace")
        if not csv_data:
            return Response(
                {"error": "CSV data is required"}, status=status.HTTP_400_BAD_REQUEST
            )
        try:
            return Response(import_attendees(event, csv_data))
        except ValidationError as e:
            return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)


class AdminFestivalViewSet(ModelValidationMixin, viewsets.ModelViewSet):
    queryset = Festival.objects.all().prefetch_related("events")
    serializer_class = AdminFestivalSerializer
    permission_classes = [AdminPermission]
    filterset_fields = ["is_active"]

    def get_serializer_class(self):
        if self.action in ("list", "retrieve"):
            return FestivalSerializer
        return AdminFestivalSerializer
