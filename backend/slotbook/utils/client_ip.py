# Client address for rate limiting and audit lines.

from fastapi import Request


def client_ip(request: Request) -> str:
    headers = request.headers

    ip = headers.get("X-Real-IP") or headers.get("CF-Connecting-IP")
    if ip:
        return ip.strip()

    forwarded = headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    return request.client.host if request.client else "unknown"
