import logging
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from eventhub.settings import DEBUG
from django.http import JsonResponse
from django.shortcuts import redirect
from django.db import connection, DatabaseError

logger = logging.getLogger(__name__)


class HealthCheckView(APIView):
    """
    A health check endpoint that performs a simple '1 + 1 = 2' sum directly in the database.
    """

    authentication_classes = []

    def get(self, request):
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1 + 1 AS result")
                row = cursor.fetchone()
        except DatabaseError as e:
            logger.error("Health check failed: %s", e)
            return Response(
                {"status": "Error", "message": f"Health check failed: {str(e)}"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        if row and row[0] == 2:
            return Response(
                {"status": "OK", "message": "Service is running", "1+1": row[0]},
                status=status.HTTP_200_OK,
            )
        return Response(
            {
                "status": "Error",
                "message": "Unexpected result from database computation",
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


class RootView(APIView):
    """
    Root of the API. Redirects to the API documentation in debug mode.
    """

    authentication_classes = []

    def get(self, request):
        if DEBUG:
            return redirect("/swagger/")
        return Response({"status": "ok"}, status=status.HTTP_200_OK)


def custom_404_handler(request, exception=None):
    return JsonResponse({"error": "Not Found"}, status=404)
