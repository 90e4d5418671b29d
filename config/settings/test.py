from .base import *  # noqa

DEBUG = False
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

RATE_LIMIT_BACKEND = "memory"
LOGGING["loggers"]["core"]["level"] = "WARNING"  # noqa: F405
