from pydantic import BaseModel


class OkResponse(BaseModel):
    """Acknowledgement for a successful write."""

    ok: bool = True


class ErrorResponse(BaseModel):
    """Uniform error envelope."""

    error: str


class CountRow(BaseModel):
    """Single aggregate count, wrapped in a list on the wire."""

    count: int


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    database: str
