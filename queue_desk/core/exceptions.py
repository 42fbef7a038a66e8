import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from queue_desk.schemas.common import APIResponse, APIError
from queue_desk.core.error_codes import ErrorCode

from queue_desk.core.domain_exceptions import DomainException, InputValidationError

logger = logging.getLogger(__name__)

DOMAIN_STATUS_CODES = {
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.CONFIGURATION_ERROR: 500,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.INVALID_CREDENTIALS: 401,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.BOOKING_NOT_FOUND: 404,
    ErrorCode.BRANCH_NOT_FOUND: 404,
    ErrorCode.USER_NOT_FOUND: 404,
    ErrorCode.EMAIL_TAKEN: 409,
    ErrorCode.QUEUE_ALREADY_ASSIGNED: 409,
    ErrorCode.QUEUE_CONFLICT: 409,
    ErrorCode.BRANCH_IN_USE: 409,
    ErrorCode.USER_IN_USE: 409,
}

HTTP_ERROR_CODES = {
    401: ErrorCode.UNAUTHORIZED,
    404: ErrorCode.NOT_FOUND,
}


async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
        content=APIResponse(
            success=False,
            error=APIError(
                code=HTTP_ERROR_CODES.get(exc.status_code, ErrorCode.VALIDATION_ERROR),
                message=str(exc.detail),
            ),
        ).model_dump(),
    )


async def domain_exception_handler(request: Request, exc: DomainException):
    fields = exc.fields if isinstance(exc, InputValidationError) else None
    return JSONResponse(
        status_code=DOMAIN_STATUS_CODES.get(exc.code, 400),
        content=APIResponse(
            success=False,
            error=APIError(
                code=exc.code,
                message=exc.message,
                fields=fields,
            ),
        ).model_dump(),
    )


async def store_exception_handler(request: Request, exc: SQLAlchemyError):
    # Services roll back before re-raising; the caller only learns the write failed.
    logger.error(
        "Store operation failed on %s %s: %s",
        request.method,
        request.url.path,
        exc.__class__.__name__,
    )
    return JSONResponse(
        status_code=500,
        content=APIResponse(
            success=False,
            error=APIError(
                code=ErrorCode.STORE_ERROR,
                message="The operation could not be completed. Please try again.",
            ),
        ).model_dump(),
    )
