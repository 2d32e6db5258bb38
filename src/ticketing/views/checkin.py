from django.core.exceptions import ValidationError, PermissionDenied
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from base.helpers.api_permissions import LoggedIn
from base.helpers.errors import error_message
from ticketing.models import Ticket
from ticketing.services.checkin import CheckInService, CHECKIN


class CheckInViewSet(viewsets.ViewSet):
    """
    Entry scanning for every team role, scanners included. Members limited
    to some events get 403 for tickets of other events.
    """

    permission_classes = [LoggedIn]

    @swagger_auto_schema(
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={
                "ticket_id": openapi.Schema(type=openapi.TYPE_STRING),
                "token": openapi.Schema(type=openapi.TYPE_STRING),
                "action": openapi.Schema(
                    type=openapi.TYPE_STRING, enum=["checkin", "undo"], default="checkin"
                ),
            },
        ),
    )
    def create(self, request):
        service = CheckInService(request.user)
        try:
            result = service.check_in(
                ticket_id=request.data.get("ticket_id"),
                token=request.data.get("token"),
                action=request.data.get("action") or CHECKIN,
            )
        except Ticket.DoesNotExist:
            return Response({"error": "Ticket not found"}, status=status.HTTP_404_NOT_FOUND)
        except PermissionDenied as e:
            return Response({"error": str(e)}, status=status.HTTP_403_FORBIDDEN)
        except ValidationError as e:
            return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(result)

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter("token", openapi.IN_QUERY, type=openapi.TYPE_STRING),
            openapi.Parameter("ticket_id", openapi.IN_QUERY, type=openapi.TYPE_STRING),
        ],
    )
    @action(detail=False, methods=["get"])
    def verify(self, request):
        service = CheckInService(request.user)
        try:
            result = service.verify(
                ticket_id=request.query_params.get("ticket_id"),
                token=request.query_params.get("token"),
            )
        except Ticket.DoesNotExist:
            return Response(
                {"error": "Ticket not found", "valid": False},
                status=status.HTTP_404_NOT_FOUND,
            )
        except PermissionDenied as e:
            return Response({"error": str(e), "valid": False}, status=status.HTTP_403_FORBIDDEN)
        except ValidationError as e:
            return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(result)

    @swagger_auto_schema(
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={
                "ticket_ids": openapi.Schema(
                    type=openapi.TYPE_ARRAY, items=openapi.Schema(type=openapi.TYPE_STRING)
                ),
            },
            required=["ticket_ids"],
        ),
    )
    @action(detail=False, methods=["post"])
    def bulk(self, request):
        try:
            result = CheckInService(request.user).bulk_check_in(request.data.get("ticket_ids"))
        except ValidationError as e:
            return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(result)
