from typing import Any, Optional


def success_response(message: str, data: Optional[Any] = None) -> dict:
    return {
        "success": True,
        "message": message,
        "data": data,
    }


def error_body(code: str, message: str, errors: Optional[list] = None) -> dict:
    body = {
        "success": False,
        "error": code,
        "message": message,
    }
    if errors:
        body["errors"] = errors
    return body
