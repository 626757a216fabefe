"""
User-facing message catalogue.

Handlers and error responses refer to messages by stable key; the text is
picked from the catalogue for the caller's ``Accept-Language``.
"""

from typing import Dict, Optional

DEFAULT_LANGUAGE = "es"
FALLBACK_LANGUAGE = "en"

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "Error_Unauthorized": "Authentication required",
        "Error_Forbidden": "You do not have permission to access this resource",
        "Error_GatewayForbidden": "Invalid Gateway secret. Direct access to microservice is not allowed.",
        "Error_NotFound": "Resource not found",
        "Error_AnalysisNotFound": "Analysis not found",
        "Error_InternalServer": "Internal server error",
        "Success_AnalysisFound": "Analysis found",
        "Success_AnalysesByUser": "Analyses for user retrieved",
    },
    "es": {
        "Error_Unauthorized": "Se requiere autenticación",
        "Error_Forbidden": "No tiene permisos para acceder a este recurso",
        "Error_GatewayForbidden": "Secreto de Gateway inválido. No se permite el acceso directo al microservicio.",
        "Error_NotFound": "Recurso no encontrado",
        "Error_AnalysisNotFound": "Análisis no encontrado",
        "Error_InternalServer": "Error interno del servidor",
        "Success_AnalysisFound": "Análisis encontrado",
        "Success_AnalysesByUser": "Análisis del usuario obtenidos",
    },
}


def get_message(key: str, lang: Optional[str] = None) -> str:
    """Resolve a message key, falling back to English and then to the key itself."""
    catalogue = MESSAGES.get(_normalize(lang or DEFAULT_LANGUAGE)) or MESSAGES[FALLBACK_LANGUAGE]
    return catalogue.get(key, MESSAGES[FALLBACK_LANGUAGE].get(key, key))


def get_request_language(request, default: str = DEFAULT_LANGUAGE) -> str:
    """Return the first language listed in the request's Accept-Language header."""
    accept_language = request.headers.get("Accept-Language")
    if not accept_language:
        return default
    first = accept_language.split(",")[0].split(";")[0].strip()
    return _normalize(first) or default


def _normalize(lang: str) -> str:
    # "es-MX" -> "es"
    return lang.strip().lower().split("-")[0]
