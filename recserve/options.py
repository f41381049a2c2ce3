from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Mode(str, Enum):
    EXPLICIT = "explicit"
    IMPLICIT = "implicit"


class RecommenderOptions(BaseModel):
    """Hyperparameters handed to the trainer at fit time."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    factors: int = Field(8, gt=0)
    iterations: int = Field(20, gt=0)
    verbose: Optional[bool] = None  # None -> verbose only when a validation set is given
    regularization: float = Field(0.1, ge=0.0)
    alpha: float = Field(1.0, ge=0.0)  # implicit confidence: 1 + alpha * r
    random_state: Optional[int] = None

    def resolve_verbose(self, has_valid: bool) -> bool:
        return has_valid if self.verbose is None else self.verbose
