"""Gestion centralisée des erreurs API.

Toutes les erreurs sont renvoyées sous la forme `{"message": str}` avec le statut HTTP approprié:
400 validation, 401 non authentifié, 402 essai expiré, 403 interdit, 404 introuvable, 500 inattendu.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException

from vetstock.core.http_constants import HTTP_BAD_REQUEST, HTTP_INTERNAL_SERVER_ERROR
from vetstock.domain.errors import AppError

log = structlog.get_logger(__name__)

INVALID_ID_MESSAGE = "ID inválido"
UNEXPECTED_MESSAGE = "Erro interno do servidor"


def create_error_response(status_code: int, message: str) -> JSONResponse:
    """Construit la réponse d'erreur standard."""
    return JSONResponse(status_code=status_code, content={"message": message})


def format_validation_errors(errors: list[dict]) -> str:
    """Résume les erreurs Pydantic en une ligne lisible (`campo: motivo; ...`)."""
    parts = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        where = ".".join(loc)
        msg = err.get("msg", "invalid")
        parts.append(f"{where}: {msg}" if where else msg)
    return "Validation error: " + "; ".join(parts)


def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    """Erreurs du domaine: statut et message portés par l'exception."""
    log.info(
        "app_error",
        status_code=exc.status_code,
        error=type(exc).__name__,
        path=request.url.path,
    )
    return create_error_response(exc.status_code, exc.message)


def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Erreurs de validation d'entrée: 400 (identifiant de chemin invalide compris)."""
    errors = exc.errors()
    if any(err.get("loc", ("",))[0] == "path" for err in errors):
        return create_error_response(HTTP_BAD_REQUEST, INVALID_ID_MESSAGE)
    return create_error_response(HTTP_BAD_REQUEST, format_validation_errors(errors))


def handle_model_validation_error(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    """Fusion d'une mise à jour produisant un enregistrement invalide: 400."""
    return create_error_response(HTTP_BAD_REQUEST, format_validation_errors(exc.errors()))


def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    """HTTPException de FastAPI/Starlette (404 de routage, 405, ...)."""
    return create_error_response(exc.status_code, str(exc.detail))


def handle_generic_exception(request: Request, exc: Exception) -> JSONResponse:
    """Exception inattendue: journalisée avec trace, 500 générique."""
    log.error(
        "unexpected_error",
        path=request.url.path,
        exception_type=type(exc).__name__,
        exc_info=exc,
    )
    return create_error_response(HTTP_INTERNAL_SERVER_ERROR, UNEXPECTED_MESSAGE)


def register_error_handlers(app: FastAPI) -> None:
    """Branche les gestionnaires d'erreurs sur l'application."""
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(PydanticValidationError, handle_model_validation_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_generic_exception)
