from django.http import JsonResponse
from django.db import connection
from django.conf import settings
import redis


def health_check(request):
    status = {"db": False}

    # DB
    try:
        with connection.cursor() as c:
            c.execute("SELECT 1")
        status["db"] = True
    except Exception:
        pass

    # Redis only matters when it backs the rate limiter
    if getattr(settings, "RATE_LIMIT_BACKEND", "memory") == "redis":
        status["redis"] = False
        try:
            r = redis.Redis.from_url(settings.REDIS_URL)
            r.ping()
            status["redis"] = True
        except Exception:
            pass

    http_status = 200 if all(status.values()) else 503
    return JsonResponse(status, status=http_status)
