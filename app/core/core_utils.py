# core/core_utils.py
from fastapi.responses import JSONResponse


def error_response(message: str, status_code: int) -> JSONResponse:
    """
    Build the JSON error envelope returned by the API.

    Args:
        message (str): Human-readable error message.
        status_code (int): HTTP status code.

    Returns:
        JSONResponse: `{"error": message}` with the given status.
    """
    return JSONResponse({"error": message}, status_code=status_code)
