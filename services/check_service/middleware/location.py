"""
Check Service — Location context header middleware

Reads the Simphony-OrgShortName / Simphony-LocRef / Simphony-RvcRef headers
into request.state.location. With `required=True` requests missing any of
them get a 400; a non-integer RvcRef is always a 400.
"""
from dataclasses import dataclass

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

REQUIRED_HEADERS = ("Simphony-LocRef", "Simphony-OrgShortName", "Simphony-RvcRef")

# Paths that never need location context
PUBLIC_PATHS = {
    "/health",
    "/metrics",
    "/",
    "/docs",
    "/openapi.json",
}


@dataclass(frozen=True)
class LocationContext:
    org_short_name: str | None = None
    loc_ref: str | None = None
    rvc_ref: int | None = None


class LocationContextMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, required: bool = False):
        super().__init__(app)
        self.required = required

    async def dispatch(self, request: Request, call_next) -> Response:
        request.state.location = LocationContext()

        if request.method == "OPTIONS" or request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        missing = [h for h in REQUIRED_HEADERS if not request.headers.get(h)]
        if missing and self.required:
            return JSONResponse(
                status_code=400,
                content={
                    "error": "Bad Request",
                    "message": f"Missing required headers: {', '.join(missing)}",
                    "code": "MISSING_HEADERS",
                },
            )

        rvc_ref = None
        raw_rvc = request.headers.get("Simphony-RvcRef")
        if raw_rvc:
            try:
                rvc_ref = int(raw_rvc)
            except ValueError:
                return JSONResponse(
                    status_code=400,
                    content={
                        "error": "Bad Request",
                        "message": "Simphony-RvcRef must be an integer",
                        "code": "INVALID_RVCREF",
                    },
                )

        request.state.location = LocationContext(
            org_short_name=request.headers.get("Simphony-OrgShortName"),
            loc_ref=request.headers.get("Simphony-LocRef"),
            rvc_ref=rvc_ref,
        )
        return await call_next(request)
