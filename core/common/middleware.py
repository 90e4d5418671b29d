class ClientIdentifierMiddleware:
    """
    Attach request.client_key (first X-Forwarded-For hop, X-Real-IP, then REMOTE_ADDR).
    Used as the identifier part of rate-limit keys.
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.client_key = client_key_for(request)
        return self.get_response(request)


def client_key_for(request) -> str:
    forwarded = request.headers.get("X-Forwarded-For") or ""
    first = forwarded.split(",")[0].strip()
    if first:
        return first

    real_ip = (request.headers.get("X-Real-IP") or "").strip()
    if real_ip:
        return real_ip

    return request.META.get("REMOTE_ADDR") or "unknown"
