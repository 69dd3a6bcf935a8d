"""The JSON envelope every endpoint answers with."""

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorDetail(BaseModel):
    field: str | None = None
    message: str
    code: str | None = None


class Envelope(BaseModel):
    success: bool = True
    message: str
    data: Any | None = None
    errors: list[ErrorDetail] | None = None


def ok(message, data=None) -> Envelope:
    return Envelope(success=True, message=message, data=jsonable_encoder(data))


def failure(status_code, message, errors=None) -> JSONResponse:
    body = Envelope(success=False, message=message, errors=errors)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body, exclude_none=True))
