# envelopes.py
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success(data: Any, message: str = "Success", status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"success": True, "data": data, "message": message}),
    )


def error(error: str, code: int = 400, details: Optional[Dict] = None) -> JSONResponse:
    content = {"success": False, "error": error, "code": code}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=code, content=jsonable_encoder(content))


def server_error(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "code": 500, "message": message},
    )
