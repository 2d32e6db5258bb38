from rest_framework.permissions import BasePermission


class LoggedIn(BasePermission):
    """Any active team member, scanners included."""

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)


class StaffPermission(BasePermission):
    """Team members allowed to edit attendee data (everyone except scanners)."""

    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and request.user.can_edit_attendees()
        )


class AdminPermission(BasePermission):
    """Admins and managers."""

    def has_permission(self, request, view):
        return bool(
            request.user and request.user.is_authenticated and request.user.can_manage()
        )


def is_staff_request(request):
    return StaffPermission().has_permission(request, None)
