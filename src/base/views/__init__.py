from .team import TeamMemberAdminViewSet, AuthViewSet
from .notification import NotificationViewSet
from .service import HealthCheckView, RootView, custom_404_handler
