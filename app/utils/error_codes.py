# app/utils/error_codes.py

ERROR_CODES = {
    "VALIDATION_ERROR": "VALIDATION_ERROR",
    "UNAUTHORIZED": "UNAUTHORIZED",
    "INVALID_CREDENTIALS": "INVALID_CREDENTIALS",
    "INVALID_TOKEN": "INVALID_TOKEN",
    "TOKEN_EXPIRED": "TOKEN_EXPIRED",
    "FORBIDDEN": "FORBIDDEN",
    "NOT_FOUND": "NOT_FOUND",
    "METHOD_NOT_ALLOWED": "METHOD_NOT_ALLOWED",
    "CONFLICT": "CONFLICT",
    "SERVER_ERROR": "SERVER_ERROR",
    "SERVICE_UNAVAILABLE": "SERVICE_UNAVAILABLE",
}

HTTP_STATUS_TO_ERROR_CODE = {
    400: ERROR_CODES["VALIDATION_ERROR"],
    401: ERROR_CODES["UNAUTHORIZED"],
    403: ERROR_CODES["FORBIDDEN"],
    404: ERROR_CODES["NOT_FOUND"],
    405: ERROR_CODES["METHOD_NOT_ALLOWED"],
    409: ERROR_CODES["CONFLICT"],
    422: ERROR_CODES["VALIDATION_ERROR"],
    500: ERROR_CODES["SERVER_ERROR"],
    503: ERROR_CODES["SERVICE_UNAVAILABLE"],
}
