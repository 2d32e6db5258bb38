from rest_framework import routers
from .views.poll import PollQuestionViewSet
from .views.media import PhotoViewSet, ReviewViewSet
from .views.survey import SurveyViewSet, AdminSurveyViewSet
from .views.certificate import AdminCertificateViewSet

router = routers.DefaultRouter()

# Live engagement
router.register(r"polls", PollQuestionViewSet, basename="polls")
router.register(r"photos", PhotoViewSet, basename="photos")
router.register(r"reviews", ReviewViewSet, basename="reviews")

# Feedback
router.register(r"surveys", SurveyViewSet, basename="surveys")
router.register(r"admin/surveys", AdminSurveyViewSet, basename="admin-surveys")

# Certificates
router.register(r"admin/certificates", AdminCertificateViewSet, basename="admin-certificates")

urlpatterns = router.urls
