# domains/accounts/jwt.py
import logging

from django.contrib.auth import get_user_model

from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed as TokenAuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import UserStatus

logger = logging.getLogger(__name__)

User = get_user_model()

LOGIN_FAILED = "No active account found with the given credentials"


def _login_failed() -> AuthenticationFailed:
    return AuthenticationFailed(detail=LOGIN_FAILED, code="no_active_account")


class EmailTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Email + password login for buyers and artists.

    Only accounts with ``status == active`` get tokens; inactive and deleted
    accounts fail with the same message as a wrong password.
    """

    username_field = "email"

    def validate(self, attrs):
        email = (attrs.get("email") or "").strip()
        password = attrs.get("password") or ""
        if not email or not password:
            raise _login_failed()

        user = User.objects.filter(email__iexact=email).first()
        if user is None or not user.check_password(password):
            raise _login_failed()
        if user.status != UserStatus.ACTIVE or not user.is_active:
            logger.info("login refused for %s account %s", user.status, user.pk)
            raise _login_failed()

        refresh = self.get_token(user)
        return {
            "refresh": str(refresh),
            "access": str(refresh.access_token),
        }

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        # clients pick buyer vs admin screens from the token alone
        token["role"] = user.role
        return token


class ActiveAccountJWTAuthentication(JWTAuthentication):
    """Bearer auth that also drops tokens of accounts deactivated or deleted after login."""

    def get_user(self, validated_token):
        user = super().get_user(validated_token)
        if user.status != UserStatus.ACTIVE:
            raise TokenAuthenticationFailed("User is inactive", code="user_inactive")
        return user


# imported after ActiveAccountJWTAuthentication: loading DRF views resolves
# DEFAULT_AUTHENTICATION_CLASSES, which points back at this module
from rest_framework_simplejwt.views import TokenObtainPairView  # noqa: E402


class EmailTokenObtainPairView(TokenObtainPairView):
    serializer_class = EmailTokenObtainPairSerializer
