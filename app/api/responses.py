from fastapi.responses import JSONResponse, Response

JSON_CONTENT_TYPE = "application/json; charset=utf-8"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def cache_control(ttl_seconds: int) -> str:
    return f"public, max-age={ttl_seconds}"


def edge_headers(ttl_seconds: int) -> dict[str, str]:
    """Headers carried by every proxy response"""
    return {**CORS_HEADERS, "Cache-Control": cache_control(ttl_seconds)}


def json_body_response(
    body: str,
    ttl_seconds: int,
    status_code: int = 200,
    extra_headers: dict[str, str] | None = None,
) -> Response:
    """Response for an already-serialized JSON body, sent byte-for-byte"""
    headers = {
        "Content-Type": JSON_CONTENT_TYPE,
        **edge_headers(ttl_seconds),
        **(extra_headers or {}),
    }
    return Response(content=body, status_code=status_code, headers=headers)


def error_response(message: str, status_code: int, ttl_seconds: int) -> JSONResponse:
    """Error envelope: {"error": message}"""
    return JSONResponse(
        status_code=status_code,
        content={"error": message},
        headers={"Content-Type": JSON_CONTENT_TYPE, **edge_headers(ttl_seconds)},
    )


def preflight_response(ttl_seconds: int) -> Response:
    return Response(
        status_code=204,
        headers={"Content-Type": JSON_CONTENT_TYPE, **edge_headers(ttl_seconds)},
    )
