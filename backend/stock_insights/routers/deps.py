"""Shared router helpers."""

from fastapi.responses import JSONResponse

from stock_insights.schemas.stock import ErrorResponse


def error_response(status_code: int, error: str, message: str | None = None) -> JSONResponse:
    """Build the `{success: false, error}` payload every route uses for failures."""
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))
