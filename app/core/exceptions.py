import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppException:
    """
    Raise HTTP errors for the fleet API's error taxonomy.

    - not found                        -> 404
    - bad input / uniqueness violation -> 400
    - lifecycle conflict (e.g. renting a suspended vehicle) -> 400
    - missing or invalid token         -> 401
    - role mismatch / rejected applicant -> 403
    """

    @staticmethod
    def raise_400(message: str = "Bad Request"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)

    @staticmethod
    def raise_401(message: str = "Unauthorized"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=message)

    @staticmethod
    def raise_403(message: str = "Forbidden"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=message)

    @staticmethod
    def raise_404(message: str = "Not Found"):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)

    @staticmethod
    def raise_not_found(entity: str, entity_id=None):
        """404 with a uniform '<Entity> not found' message."""
        if entity_id is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} not found")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} with id {entity_id} not found")

    @staticmethod
    def raise_conflict(message: str):
        """Operation violates a lifecycle rule of the entity. Reported as 400."""
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def error_message(exc: Exception) -> str:
    """Human readable message for per-item error capture in batch jobs."""
    if isinstance(exc, HTTPException):
        return str(exc.detail)
    return str(exc) or exc.__class__.__name__


def _validation_errors(errors: list) -> list:
    """Pydantic error dicts with ctx values stringified (ctx may hold the raising exception)."""
    cleaned = []
    for error in errors:
        item = {"type": error.get("type"), "loc": error.get("loc"), "msg": error.get("msg")}
        if error.get("ctx"):
            item["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        cleaned.append(item)
    return cleaned


def register_exception_handlers(app: FastAPI) -> None:
    """Every error leaves the API as {"message": ...}; validation errors add an "errors" list."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = _validation_errors(exc.errors())
        logger.info("422 on %s %s: %s", request.method, request.url.path, errors)
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"message": "Validation error", "errors": errors},
        )

    @app.exception_handler(ValidationError)
    async def model_validation_handler(request: Request, exc: ValidationError):
        logger.error("Response model validation failed on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"message": "Validation error", "errors": _validation_errors(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Internal server error"},
        )
