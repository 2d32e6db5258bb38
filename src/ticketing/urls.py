from rest_framework import routers
from .views.event import (
    EventViewSet,
    FestivalViewSet,
    AdminEventViewSet,
    AdminFestivalViewSet,
)
from .views.ticket import TicketViewSet, AdminTicketViewSet
from .views.payment import RazorpayViewSet, PhonePeViewSet
from .views.checkin import CheckInViewSet
from .views.group import AdminGroupViewSet
from .views.promo import (
    PromoCodeViewSet,
    AdminPromoCodeViewSet,
    WaitlistViewSet,
    AdminWaitlistViewSet,
)
from .views.email import AdminEmailViewSet, AdminEmailTemplateViewSet

router = routers.DefaultRouter()

# Events and Festivals
router.register(r"events", EventViewSet, basename="events")
router.register(r"festivals", FestivalViewSet, basename="festivals")
router.register(r"admin/events", AdminEventViewSet, basename="admin-events")
router.register(r"admin/festivals", AdminFestivalViewSet, basename="admin-festivals")

# Tickets
router.register(r"tickets", TicketViewSet, basename="tickets")
router.register(r"admin/tickets", AdminTicketViewSet, basename="admin-tickets")
router.register(r"admin/groups", AdminGroupViewSet, basename="admin-groups")

# Payments
router.register(r"razorpay", RazorpayViewSet, basename="razorpay")
router.register(r"phonepe", PhonePeViewSet, basename="phonepe")

# Check-in
router.register(r"checkin", CheckInViewSet, basename="checkin")

# Promo codes and waitlist
router.register(r"promo-codes", PromoCodeViewSet, basename="promo-codes")
router.register(r"admin/promo-codes", AdminPromoCodeViewSet, basename="admin-promo-codes")
router.register(r"waitlist", WaitlistViewSet, basename="waitlist")
router.register(r"admin/waitlist", AdminWaitlistViewSet, basename="admin-waitlist")

# Email
router.register(r"admin/email", AdminEmailViewSet, basename="admin-email")
router.register(
    r"admin/email-templates", AdminEmailTemplateViewSet, basename="admin-email-templates"
)

urlpatterns = router.urls
