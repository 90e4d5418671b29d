import json
from dataclasses import dataclass
from urllib.parse import quote, unquote

from django.conf import settings
from rest_framework.authentication import BaseAuthentication


@dataclass(frozen=True)
class DemoUser:
    id: str
    name: str = ""

    is_authenticated = True
    is_anonymous = False


def parse_demo_cookie(raw):
    if not raw:
        return None
    try:
        payload = json.loads(unquote(raw))
    except ValueError:
        return None
    if not isinstance(payload, dict) or not payload.get("id"):
        return None
    return DemoUser(id=str(payload["id"]), name=str(payload.get("name") or ""))


def serialize_demo_cookie(user: DemoUser) -> str:
    return quote(json.dumps({"id": user.id, "name": user.name}))


class DemoCookieAuthentication(BaseAuthentication):
    """
    Cookie:
      demo_user=<url-encoded JSON {"id": "...", "name": "..."}>

    Stand-in for a real session; anyone can mint the cookie via /v1/auth/demo-login.
    A missing or unreadable cookie means "not authenticated" (401 from IsAuthenticated).
    """

    def authenticate(self, request):
        cookie_name = getattr(settings, "DEMO_AUTH_COOKIE", "demo_user")
        user = parse_demo_cookie(request.COOKIES.get(cookie_name))
        if user is None:
            return None
        return (user, None)

    def authenticate_header(self, request):
        return 'DemoCookie realm="api"'
