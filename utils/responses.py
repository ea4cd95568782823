from typing import Any, Optional
from fastapi.responses import JSONResponse


def success(message: Optional[str] = None, data: Any = None, results: Optional[int] = None,
            status_code: int = 200) -> JSONResponse:
    body: dict[str, Any] = {"status": "success"}
    if message is not None:
        body["message"] = message
    if results is not None:
        body["results"] = results
    if data is not None:
        body["data"] = data
    return JSONResponse(status_code=status_code, content=body)


def error(message: str, status_code: int = 500, details: Optional[str] = None) -> JSONResponse:
    body: dict[str, Any] = {"status": "error", "message": message}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)
