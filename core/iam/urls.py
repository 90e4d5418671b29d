from django.urls import path
from core.iam.api import demo_login, logout, me

urlpatterns = [
    path("auth/demo-login", demo_login, name="demo-login"),
    path("auth/logout", logout, name="demo-logout"),
    path("auth/me", me, name="auth-me"),
]
