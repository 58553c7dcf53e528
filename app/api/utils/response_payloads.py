from typing import Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def error_response(
    *,
    status_code: int,
    message: str,
    error: str = "ERROR",
    errors: Optional[Dict[str, List[str]]] = None,
) -> JSONResponse:
    """
    Create a standardized JSON response for failed requests.

    Args:
        status_code (int): HTTP status code representing the error (e.g. 400, 404, 500).
        message (str): High-level human-readable error description.
        error (str): Machine-readable error code (e.g. "VALIDATION_ERROR").
            Defaults to "ERROR".
        errors (Optional[Dict[str, List[str]]]): Optional field-level validation errors
            in the form:
                {
                    "field_name": ["error message 1", "error message 2"],
                    ...
                }

    Returns:
        JSONResponse: Standard error structure:
            {
                "error": "<ERROR_CODE>",
                "message": "<message>",
                "status_code": <status_code>,
                "errors": {
                    "field": ["error1", "error2"],
                    ...
                }
            }
    """

    response_data = {
        "error": error,
        "message": message,
        "status_code": status_code,
        "errors": errors or {},
    }

    return JSONResponse(status_code=status_code, content=jsonable_encoder(response_data))
