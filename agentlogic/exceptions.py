import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ValidationError(HTTPException):
    """Malformed or missing request input, rejected before any work starts."""

    def __init__(self, message: str, field: str = None):
        detail = {"error": "validation_error", "message": message}
        if field:
            detail["field"] = field
        super().__init__(status_code=400, detail=detail)


class ExerciseNotFoundError(HTTPException):
    def __init__(self, exercise_id: int):
        super().__init__(
            status_code=404,
            detail={"error": "not_found", "message": f"Exercise {exercise_id} not found"},
        )


async def validation_exception_handler(request: Request, exc: ValidationError):
    content = {
        "success": False,
        "message": exc.detail.get("message", "Validation error"),
    }
    if exc.detail.get("field"):
        content["field"] = exc.detail["field"]
    return JSONResponse(status_code=400, content=content)


async def not_found_exception_handler(request: Request, exc: ExerciseNotFoundError):
    return JSONResponse(
        status_code=404,
        content={"success": False, "message": exc.detail.get("message", "Not found")},
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Body shape errors (wrong types, bad JSON) are reported as 400 like every other input error."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body") or None
    logger.info("Rejected malformed request body", extra={"path": request.url.path, "field": field})
    content = {
        "success": False,
        "message": f"Invalid request body: {first.get('msg', 'malformed input')}",
    }
    if field:
        content["field"] = field
    return JSONResponse(status_code=400, content=content)
