from rest_framework.permissions import BasePermission


def is_service_request(request) -> bool:
    return isinstance(request.auth, str) and bool(request.auth)


class IsAuthenticatedOrApiKey(BasePermission):
    message = "Authentication credentials or a valid X-API-Key header are required."

    def has_permission(self, request, view):
        if request.method == "OPTIONS":
            return True
        if is_service_request(request):
            return True
        return bool(request.user and request.user.is_authenticated)


class IsAccountOwnerOrAdmin(BasePermission):
    """Allows access to a user's resources for that user, staff and service keys."""

    message = "You are not allowed to access resources belonging to this user."

    def has_permission(self, request, view):
        if is_service_request(request):
            return True
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.is_staff:
            return True
        return user.username == view.kwargs.get("username")
