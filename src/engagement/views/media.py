from django.core.exceptions import ValidationError
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets, mixins, status
from rest_framework.response import Response
from base.helpers.api_permissions import StaffPermission, is_staff_request
from base.helpers.errors import error_message
from engagement.models import Photo, Review
from engagement.serializers.media import PhotoSerializer, ReviewSerializer


class PhotoViewSet(mixins.CreateModelMixin, mixins.DestroyModelMixin, viewsets.GenericViewSet):
    """Attendee photo wall. Uploads wait for approval before they are listed."""

    queryset = Photo.objects.all()
    serializer_class = PhotoSerializer
    http_method_names = ["get", "post", "patch", "delete"]

    def get_permissions(self):
        if self.action == "destroy":
            return [StaffPermission()]
        return super().get_permissions()

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter("event", openapi.IN_QUERY, type=openapi.TYPE_STRING, required=True),
            openapi.Parameter("all", openapi.IN_QUERY, type=openapi.TYPE_BOOLEAN),
        ],
    )
    def list(self, request, *args, **kwargs):
        event_id = request.query_params.get("event")
        if not event_id:
            return Response({"error": "Event ID is required"}, status=status.HTTP_400_BAD_REQUEST)
        show_all = request.query_params.get("all") == "true" and is_staff_request(request)
        try:
            photos = Photo.objects.filter(event_id=event_id)
            if not show_all:
                photos = photos.filter(is_approved=True)
            photos = list(photos)
        except ValidationError as e:
            return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"photos": PhotoSerializer(photos, many=True).data})

    def create(self, request, *args, **kwargs):
        if not all(request.data.get(field) for field in ("event", "image_url", "uploader_name")):
            return Response(
                {"error": "Event ID, image URL, and uploader name are required"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        serializer = PhotoSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        photo = serializer.save()
        return Response(
            {
                "success": True,
                "photo": PhotoSerializer(photo).data,
                "message": "Photo uploaded! It will appear after admin approval.",
            },
            status=status.HTTP_201_CREATED,
        )

    @swagger_auto_schema(
        operation_description="action=approve (team members, optional approved flag) or action=like.",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={
                "action": openapi.Schema(type=openapi.TYPE_STRING, enum=["approve", "like"]),
                "approved": openapi.Schema(type=openapi.TYPE_BOOLEAN, default=True),
            },
        ),
    )
    def partial_update(self, request, *args, **kwargs):
        photo = self.get_object()
        action = request.data.get("action")
        if action == "approve":
            if not is_staff_request(request):
                self.permission_denied(request, message="Only team members can approve photos")
            photo.approve(request.data.get("approved") is not False)
            return Response({"success": True, "photo": PhotoSerializer(photo).data})
        if action == "like":
            return Response({"success": True, "likes": photo.like()})
        return Response({"error": "Invalid action"}, status=status.HTTP_400_BAD_REQUEST)


class ReviewViewSet(mixins.ListModelMixin, mixins.CreateModelMixin, viewsets.GenericViewSet):
    queryset = Review.objects.all()
    serializer_class = ReviewSerializer
    filterset_fields = ["event"]
