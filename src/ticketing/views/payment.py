import logging
from django.core.exceptions import ValidationError
from django.db.models import Q
from django.http import HttpResponseRedirect
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from base.helpers.errors import error_message
from eventhub.settings import APP_URL
from ticketing.models import Ticket
from ticketing.pg import PaymentGatewayError, PhonePePaymentGateway, WebhookEvent
from ticketing.services.order import OrderService
from ticketing.services.payment import PaymentService
from ticketing.services.webhook import WebhookService

logger = logging.getLogger(__name__)

RAZORPAY_PG_NAME = "razorpay"
PHONEPE_PG_NAME = "phonepe"


def _create_order(ticket_id, ticket_ids, pg_name):
    if not ticket_id:
        return Response({"error": "Ticket ID is required"}, status=status.HTTP_400_BAD_REQUEST)
    try:
        order = OrderService().create_payment_order(ticket_id, ticket_ids, pg_name=pg_name)
    except Ticket.DoesNotExist:
        return Response({"error": "Ticket not found"}, status=status.HTTP_404_NOT_FOUND)
    except ValidationError as e:
        return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
    except PaymentGatewayError as e:
        return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response(order)


class RazorpayViewSet(viewsets.ViewSet):
    @swagger_auto_schema(
        operation_description="""
        Create a Razorpay order for one or more pending tickets of the same event.
        The amount is computed from the tickets, any amount in the request is ignored.
        """,
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={
                "ticket_id": openapi.Schema(type=openapi.TYPE_STRING),
                "ticket_ids": openapi.Schema(
                    type=openapi.TYPE_ARRAY, items=openapi.Schema(type=openapi.TYPE_STRING)
                ),
            },
            required=["ticket_id"],
        ),
    )
    @action(detail=False, methods=["post"])
    def order(self, request):
        return _create_order(
            request.data.get("ticket_id"), request.data.get("ticket_ids"), RAZORPAY_PG_NAME
        )

    @swagger_auto_schema(
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={
                "razorpay_order_id": openapi.Schema(type=openapi.TYPE_STRING),
                "razorpay_payment_id": openapi.Schema(type=openapi.TYPE_STRING),
                "razorpay_signature": openapi.Schema(type=openapi.TYPE_STRING),
                "ticket_id": openapi.Schema(type=openapi.TYPE_STRING),
            },
        ),
    )
    @action(detail=False, methods=["post"])
    def verify(self, request):
        order_id = request.data.get("razorpay_order_id")
        payment_id = request.data.get("razorpay_payment_id")
        signature = request.data.get("razorpay_signature")
        if not order_id or not payment_id or not signature:
            return Response(
                {"error": "Missing payment details"}, status=status.HTTP_400_BAD_REQUEST
            )
        try:
            tickets = OrderService().verify_razorpay_payment(
                order_id, payment_id, signature, ticket_id=request.data.get("ticket_id")
            )
        except Ticket.DoesNotExist:
            return Response({"error": "Ticket not found"}, status=status.HTTP_404_NOT_FOUND)
        except ValidationError as e:
            return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(
            {
                "success": True,
                "ticket_id": str(tickets[0].ticket_id),
                "ticket_ids": [str(ticket.ticket_id) for ticket in tickets],
                "token": tickets[0].token,
            }
        )

    # Razorpay Webhook for Payment Confirmation
    @action(detail=False, methods=["post"], authentication_classes=[])
    def webhook(self, request):
        signature = request.headers.get("X-Razorpay-Signature")
        try:
            WebhookService().process_pg_webhook(RAZORPAY_PG_NAME, request.body, signature)
        except PaymentGatewayError as e:
            logger.warning("Rejected Razorpay webhook: %s", e)
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except Ticket.DoesNotExist:
            logger.warning("Razorpay webhook for an unknown order")
            return Response({"status": "ignored"})
        return Response({"status": "success"})


class PhonePeViewSet(viewsets.ViewSet):
    @swagger_auto_schema(
        operation_description="Start a PhonePe checkout. Returns the URL to redirect the buyer to.",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={"ticket_id": openapi.Schema(type=openapi.TYPE_STRING)},
            required=["ticket_id"],
        ),
    )
    @action(detail=False, methods=["post"])
    def pay(self, request):
        return _create_order(request.data.get("ticket_id"), None, PHONEPE_PG_NAME)

    @swagger_auto_schema(
        method="get",
        manual_parameters=[
            openapi.Parameter(
                "transaction_id",
                openapi.IN_QUERY,
                description="Ticket ID used as the merchant transaction id",
                type=openapi.TYPE_STRING,
            ),
        ],
    )
    @swagger_auto_schema(
        method="post",
        operation_description="""
        PhonePe redirect/callback. Real callbacks carry the base64 response and an X-VERIFY header.
        In mock mode the body is {transaction_id, status}.
        """,
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={
                "response": openapi.Schema(type=openapi.TYPE_STRING),
                "transaction_id": openapi.Schema(type=openapi.TYPE_STRING),
                "status": openapi.Schema(type=openapi.TYPE_STRING),
            },
        ),
    )
    @action(detail=False, methods=["get", "post"], authentication_classes=[])
    def callback(self, request):
        if request.method == "GET":
            return self._status(request)
        if "response" not in request.data and request.data.get("transaction_id"):
            return self._mock_callback(request)
        return self._gateway_callback(request)

    def _status(self, request):
        transaction_id = request.query_params.get("transaction_id")
        if not transaction_id:
            return Response(
                {"error": "Transaction ID required"}, status=status.HTTP_400_BAD_REQUEST
            )
        try:
            return Response(PaymentService(PHONEPE_PG_NAME).check_status(transaction_id))
        except PaymentGatewayError as e:
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    def _mock_callback(self, request):
        if not PhonePePaymentGateway.mock_mode:
            return Response(
                {"error": "Mock payments are disabled"}, status=status.HTTP_400_BAD_REQUEST
            )
        transaction_id = request.data.get("transaction_id")
        if request.data.get("status") != "SUCCESS":
            return Response(
                {"success": False, "error": "Payment failed"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        try:
            tickets, _ = OrderService().confirm_tickets(
                Q(pk=transaction_id), PHONEPE_PG_NAME, payment_id=f"MOCK_{transaction_id}"
            )
        except Ticket.DoesNotExist:
            return Response({"error": "Ticket not found"}, status=status.HTTP_404_NOT_FOUND)
        except ValidationError as e:
            return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
        ticket = tickets[0]
        return Response(
            {
                "success": True,
                "ticket_id": str(ticket.ticket_id),
                "token": ticket.token,
                "message": "Payment successful",
            }
        )

    def _gateway_callback(self, request):
        try:
            webhook_details = WebhookService().process_pg_webhook(
                PHONEPE_PG_NAME,
                request.data.get("response"),
                request.headers.get("X-VERIFY", ""),
            )
        except PaymentGatewayError as e:
            logger.warning("Rejected PhonePe callback: %s", e)
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except Ticket.DoesNotExist:
            return Response({"error": "Ticket not found"}, status=status.HTTP_404_NOT_FOUND)
        except ValidationError as e:
            return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)

        ticket_id = webhook_details.data["transaction_id"]
        if webhook_details.event == WebhookEvent.PAYMENT_SUCCESS:
            return HttpResponseRedirect(f"{APP_URL}/ticket/{ticket_id}?success=true")
        if webhook_details.event == WebhookEvent.PAYMENT_PENDING:
            try:
                found = Ticket.objects.filter(pk=ticket_id).exists()
            except ValidationError:
                found = False
            if not found:
                return Response({"error": "Ticket not found"}, status=status.HTTP_404_NOT_FOUND)
            return HttpResponseRedirect(f"{APP_URL}/ticket/{ticket_id}?pending=true")
        return HttpResponseRedirect(f"{APP_URL}/?payment_failed=true")
