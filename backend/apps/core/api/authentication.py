from hmac import compare_digest

from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from rest_framework import authentication, exceptions


class ApiKeyAuthentication(authentication.BaseAuthentication):
    """Service credentials for device bridges and admin tooling, sent as ``X-API-Key``."""

    header_name = "HTTP_X_API_KEY"

    def authenticate(self, request):
        api_key = request.META.get(self.header_name)
        if not api_key:
            return None

        candidate = api_key.encode()
        valid_keys = getattr(settings, "DIVELOG_API_KEYS", [])
        if not any(compare_digest(candidate, key.encode()) for key in valid_keys):
            raise exceptions.AuthenticationFailed("Invalid API key.")

        return (AnonymousUser(), api_key)

    def authenticate_header(self, request):
        return "X-API-Key"
