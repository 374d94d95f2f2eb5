"""
Error taxonomy for the archive API.

Every failure a route can produce is one of the classes below. They carry
the HTTP status and the short error code, and are rendered by the handlers
registered in main as ``{"error", "message", "details"?}``.
"""
import logging
from typing import Any, List, Optional

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class ArchiveError(Exception):
    status_code = 500
    code = 'InternalError'
    default_message = 'An unexpected error occurred'

    def __init__(self, message: Optional[str] = None, details: Optional[List[Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_body(self) -> dict:
        body = {'error': self.code, 'message': self.message}
        if self.details:
            body['details'] = self.details
        return body


class ValidationFailed(ArchiveError):
    status_code = 400
    code = 'ValidationFailed'
    default_message = 'Please check your input'


class Unauthenticated(ArchiveError):
    status_code = 401
    code = 'Unauthenticated'
    default_message = 'Please provide a valid authentication token'


class InvalidCredential(Unauthenticated):
    code = 'InvalidCredential'
    default_message = 'The provided authentication token is invalid'


class IdentityUnavailable(Unauthenticated):
    code = 'IdentityUnavailable'
    default_message = 'The account for this token does not exist or is deactivated'


class Forbidden(ArchiveError):
    status_code = 403
    code = 'Forbidden'
    default_message = 'You do not have permission to access this resource'


class NotFound(ArchiveError):
    status_code = 404
    code = 'NotFound'
    default_message = 'The requested resource does not exist'


class StorageError(ArchiveError):
    status_code = 500
    code = 'StorageError'
    default_message = 'An error occurred while accessing storage'


class StorageTimeout(StorageError):
    status_code = 503
    code = 'Timeout'
    default_message = 'Storage did not respond in time, please retry later'


async def archive_error_handler(_request: Request, exc: ArchiveError):
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_body()))


async def validation_error_handler(_request: Request, exc: RequestValidationError):
    details = [
        {'loc': list(err.get('loc', ())), 'msg': err.get('msg'), 'type': err.get('type')}
        for err in exc.errors()
    ]
    err = ValidationFailed('Please check your input', details=details)
    return JSONResponse(status_code=err.status_code, content=jsonable_encoder(err.to_body()))


async def http_error_handler(_request: Request, exc: StarletteHTTPException):
    code = NotFound.code if exc.status_code == 404 else 'HTTPError'
    return JSONResponse(
        status_code=exc.status_code,
        content={'error': code, 'message': str(exc.detail)},
        headers=getattr(exc, 'headers', None),
    )


def register_error_handlers(app):
    app.add_exception_handler(ArchiveError, archive_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
