import logging
from django.http import HttpResponse
from drf_yasg.utils import swagger_auto_schema
from pypdf.errors import PyPdfError
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from base.helpers.api_permissions import AdminPermission
from engagement.models import Certificate
from engagement.serializers.certificate import (
    CertificateSerializer,
    GenerateCertificateSerializer,
    BatchCertificateSerializer,
    BulkDeleteCertificateSerializer,
)
from engagement.services.certificate import (
    MAX_BATCH_SIZE,
    CertificateError,
    CertificateService,
    certificate_filename,
    collect_batch_names,
    safe_filename,
)
from ticketing.models import Event

logger = logging.getLogger(__name__)


def _event_settings(event, overrides):
    settings = dict(event.certificate_settings or {}) if event else {}
    settings.update(overrides or {})
    return settings


class AdminCertificateViewSet(viewsets.ModelViewSet):
    queryset = Certificate.objects.select_related("event")
    serializer_class = CertificateSerializer
    permission_classes = [AdminPermission]
    filterset_fields = ["event", "type"]

    def create(self, request, *args, **kwargs):
        if not request.data.get("event") or not request.data.get("name"):
            return Response(
                {"error": "Missing required fields: event, name"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return super().create(request, *args, **kwargs)

    @swagger_auto_schema(
        operation_description="Delete every certificate record of an event, optionally of one type.",
        request_body=BulkDeleteCertificateSerializer,
    )
    @action(detail=False, methods=["post"])
    def bulk_delete(self, request):
        serializer = BulkDeleteCertificateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        deleted = Certificate.delete_for_event(
            serializer.validated_data["event"], serializer.validated_data.get("type")
        )
        return Response({"success": True, "deleted": deleted})

    @swagger_auto_schema(
        operation_description="""
        Render one certificate PDF. Uses the event's template and layout settings when an
        event is given, request settings override them. The issued certificate is recorded
        unless save_to_db is false.
        """,
        request_body=GenerateCertificateSerializer,
    )
    @action(detail=False, methods=["post"])
    def generate(self, request):
        serializer = GenerateCertificateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        name = (data.get("name") or "").strip()
        if not name:
            return Response({"error": "Name is required"}, status=status.HTTP_400_BAD_REQUEST)

        event = None
        if data.get("event"):
            try:
                event = Event.objects.get(pk=data["event"])
            except Event.DoesNotExist:
                return Response({"error": "Event not found"}, status=status.HTTP_404_NOT_FOUND)

        service = CertificateService(event, settings=_event_settings(event, data.get("settings")))
        try:
            pdf = service.generate(name)
        except (CertificateError, PyPdfError, OSError) as e:
            logger.error("Failed to generate certificate for %s: %s", name, e)
            return Response(
                {"error": "Failed to generate certificate", "details": str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        if event is not None and data["save_to_db"]:
            Certificate.objects.create(
                event=event, name=name, email=data["email"], type=data["type"]
            )

        response = HttpResponse(pdf, content_type="application/pdf")
        response["Content-Disposition"] = f'attachment; filename="{certificate_filename(name)}"'
        return response

    @swagger_auto_schema(
        operation_description=f"""
        ZIP of certificates for the given names and, with include_from_attendees, every
        paid attendee of the event. At most {MAX_BATCH_SIZE} per batch.
        """,
        request_body=BatchCertificateSerializer,
    )
    @action(detail=False, methods=["post"])
    def batch(self, request):
        serializer = BatchCertificateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            event = Event.objects.get(pk=data["event"])
        except Event.DoesNotExist:
            return Response({"error": "Event not found"}, status=status.HTTP_404_NOT_FOUND)

        names = collect_batch_names(event, data["names"], data["include_from_attendees"])
        if not names:
            return Response(
                {"error": "No names provided for certificate generation"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        if len(names) > MAX_BATCH_SIZE:
            return Response(
                {
                    "error": f"Maximum {MAX_BATCH_SIZE} certificates per batch. "
                    f"You requested {len(names)}."
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        service = CertificateService(event, settings=_event_settings(event, data.get("settings")))
        try:
            archive, generated = service.generate_batch(names, data["type"])
        except (CertificateError, PyPdfError, OSError) as e:
            logger.error("Batch certificate generation failed for %s: %s", event.event_id, e)
            return Response(
                {"error": "Failed to generate certificates", "details": str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        logger.info("Generated %s of %s certificates for %s", generated, len(names), event.name)

        response = HttpResponse(archive, content_type="application/zip")
        response["Content-Disposition"] = (
            f'attachment; filename="{safe_filename(event.name)}_{data["type"]}_certificates.zip"'
        )
        response["X-Certificates-Generated"] = str(generated)
        response["X-Certificates-Total"] = str(len(names))
        return response
