import math
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


def _check_finite(value: Any):
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError("slot values must not contain NaN or Infinity")
    if isinstance(value, dict):
        for item in value.values():
            _check_finite(item)
    elif isinstance(value, list):
        for item in value:
            _check_finite(item)


class Slot(BaseModel):
    """
    Free-form slot document as sent by the frontend.

    No fields are declared: whatever JSON object the client posts is stored
    as is. The list endpoint sorts on "date" and "startTime" if present.
    """
    model_config = ConfigDict(extra="allow")

    @model_validator(mode="after")
    def reject_non_finite_numbers(self):
        # NaN/Infinity lassen sich nicht als JSON ausliefern
        _check_finite(self.model_extra or {})
        return self
