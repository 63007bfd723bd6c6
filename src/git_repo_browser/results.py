"""Result types returned by tool handlers."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from pydantic import BaseModel


@dataclass(frozen=True)
class ToolResponse:
    """
    Outcome of a tool invocation: either a success payload or an error.

    Success payloads are arbitrary JSON values (or pydantic models, or plain
    text). Failures carry a human-readable message and optional extra fields
    (e.g., merge conflicts) that are rendered next to it.
    """

    payload: Any = None
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, payload: Any) -> "ToolResponse":
        return cls(payload=payload)

    @classmethod
    def failure(cls, message: str, **details: Any) -> "ToolResponse":
        return cls(error=message, details=details)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_data(self) -> Any:
        """Return the JSON-compatible body of this response."""
        if self.is_error:
            return {"error": self.error, **self.details}
        if isinstance(self.payload, BaseModel):
            return self.payload.model_dump()
        return self.payload

    def render(self) -> str:
        """Render the response as the text sent back to the caller."""
        data = self.to_data()
        if isinstance(data, str):
            return data
        return json.dumps(data, indent=2)
