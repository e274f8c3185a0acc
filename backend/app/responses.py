"""
Conversion des échecs de service en réponses HTTP.
Le code HTTP dépend uniquement du type d'erreur, jamais du message.
"""

from fastapi.responses import JSONResponse

from app.errors import HTTP_STATUS_BY_KIND, ErrorKind, ServiceError
from app.schemas.common import ErrorResponse


def error_response(error: ServiceError) -> JSONResponse:
    body = ErrorResponse(
        error=error.message,
        kind=error.kind.value,
        available_dates=error.available_dates if error.kind is ErrorKind.LESSON_NOT_FOUND else None,
    )
    return JSONResponse(
        status_code=HTTP_STATUS_BY_KIND[error.kind],
        content=body.model_dump(by_alias=True, exclude_none=True),
    )
