from typing import Any, Optional
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}

def no_store_json(data, status_code: int = 200):
    """Return JSONResponse with no-store caching headers."""
    return JSONResponse(content=jsonable_encoder(data), status_code=status_code, headers=NO_STORE_HEADERS)

def error_json(message: str, status_code: int, details: Any = None, headers: Optional[dict] = None):
    """Uniform error body: {"error": ..., "details"?: ...}."""
    body = {"error": message}
    if details is not None:
        body["details"] = details
    return JSONResponse(content=jsonable_encoder(body), status_code=status_code, headers={**NO_STORE_HEADERS, **(headers or {})})
