"""Error response schema for 404, 409 and 422 responses raised by the routers."""

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Simple error response: single top-level field detail (string). No extra keys."""

    detail: str
