"""
CORS Middleware

Answers every OPTIONS request as a preflight with 204 and a permissive
origin, and stamps the CORS headers on every other response whether or
not the request carried an Origin header.
"""

from fastapi import Request, Response

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

PREFLIGHT_MAX_AGE = "86400"


async def cors_middleware(request: Request, call_next) -> Response:
    if request.method == "OPTIONS":
        return Response(
            status_code=204,
            headers={**CORS_HEADERS, "Access-Control-Max-Age": PREFLIGHT_MAX_AGE},
        )

    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response
