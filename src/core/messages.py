"""
User-facing status messages.
"""

MISSING_FIELDS = "Completa producto y adjunta al menos un PDF."
INVALID_QUANTITY = "La cantidad debe ser al menos 1."
PDF_ONLY = "Solo se aceptan PDF."
FILE_TOO_LARGE = "Cada PDF debe pesar como máximo {max_mb} MB."
INVALID_REQUEST = "Solicitud inválida. Revisa los campos enviados."
UPLOAD_COMPLETED = "Subida completada."
UPLOAD_FAILED = "Error al subir. Revisa los logs del servidor."
UPLOAD_IN_PROGRESS = "Ya hay una subida en curso."
TRANSFER_FAILED = "No se pudo acceder al archivo. Intenta de nuevo."

INVALID_TARGET_STATUS = "Solo se puede marcar como impreso o enviado."
UPDATE_FAILED = "No se pudo actualizar el estado."
UPDATE_IN_PROGRESS = "Ya hay una actualización en curso para esta subida."
TRANSITION_NOT_ALLOWED = "Acción no disponible para el estado actual."
RECORD_NOT_FOUND = "Subida no encontrada."
FILE_NOT_FOUND = "Archivo no encontrado."
SESSION_NOT_FOUND = "Sesión de subida no encontrada."

READ_DENIED = "Sin permisos para leer 'subidas'. Ajusta los permisos de la tabla."
READ_FAILED = "No se pudieron cargar las subidas."
EMPTY_FILTER = "No hay subidas para este filtro."
LINK_COPIED = "Link copiado al portapapeles"

UNEXPECTED_ERROR = "An unexpected error occurred"
