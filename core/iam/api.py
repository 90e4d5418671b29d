from django.conf import settings
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.iam.authentication import DemoUser, serialize_demo_cookie

DEFAULT_DEMO_USER = DemoUser(id="demo-user-1", name="Demo User")


@api_view(["POST"])
@authentication_classes([])
@permission_classes([])
def demo_login(request):
    """
    POST /v1/auth/demo-login
    Body (optional): {"id": "demo-user-2", "name": "Second Demo"}

    Sets the demo_user cookie for 7 days.
    """
    data = request.data if isinstance(request.data, dict) else {}
    user_id = str(data.get("id") or "").strip()[:64]
    name = str(data.get("name") or "").strip()[:100]

    user = DemoUser(id=user_id, name=name or user_id) if user_id else DEFAULT_DEMO_USER

    resp = Response({"user": {"id": user.id, "name": user.name}})
    resp.set_cookie(
        settings.DEMO_AUTH_COOKIE,
        serialize_demo_cookie(user),
        max_age=settings.DEMO_AUTH_MAX_AGE,
        path="/",
        samesite="Lax",
    )
    return resp


@api_view(["POST"])
@authentication_classes([])
@permission_classes([])
def logout(request):
    resp = Response({"ok": True})
    resp.delete_cookie(settings.DEMO_AUTH_COOKIE, path="/")
    return resp


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def me(request):
    return Response({"user": {"id": request.user.id, "name": request.user.name}})
