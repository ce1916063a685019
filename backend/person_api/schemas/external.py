"""External Payloads: typed shapes of external service responses."""

from pydantic import BaseModel


class GenderizeResult(BaseModel):
    """Gender estimate for a first name; gender/probability are null for unknown names."""
    count: int
    name: str | None = None
    gender: str | None = None
    probability: float | None = None
