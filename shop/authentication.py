# shop/authentication.py
"""
Back-office login on top of Django's session framework.

The session only carries the admin user's document id; the user itself is
re-read from Firestore on each authenticated request so that a deleted agent
loses access immediately.
"""
import logging

from django.conf import settings
from rest_framework import permissions
from rest_framework.authentication import SessionAuthentication

from .models import AdminUser
from .services import get_admin_user_by_id

logger = logging.getLogger(__name__)


def login_admin(request, user: AdminUser):
    session = request.session
    session.cycle_key()
    session[settings.SHOP_ADMIN_SESSION_KEY] = user.id
    logger.info("Admin user %s logged in", user.username)


def logout_admin(request):
    # keep the rest of the session (cart) intact
    request.session.pop(settings.SHOP_ADMIN_SESSION_KEY, None)


class AdminSessionAuthentication(SessionAuthentication):
    def authenticate(self, request):
        session = getattr(request._request, "session", None)
        user_id = session.get(settings.SHOP_ADMIN_SESSION_KEY) if session is not None else None
        if not user_id:
            return None

        user = get_admin_user_by_id(user_id)
        if user is None:
            logger.warning("Session refers to missing admin user %s", user_id)
            session.pop(settings.SHOP_ADMIN_SESSION_KEY, None)
            return None

        self.enforce_csrf(request)
        return (user, None)


class IsShopAdmin(permissions.BasePermission):
    message = "נדרשת התחברות למערכת הניהול."

    def has_permission(self, request, view):
        return isinstance(request.user, AdminUser)


class IsSuperAdmin(IsShopAdmin):
    message = "פעולה זו מותרת למנהל ראשי בלבד."

    def has_permission(self, request, view):
        return super().has_permission(request, view) and request.user.isSuperAdmin
