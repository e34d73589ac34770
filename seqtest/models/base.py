"""Base model for serialisable report structures."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable report model that rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid")
