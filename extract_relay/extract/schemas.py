from __future__ import annotations

from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

# Opaque pass-through JSON value. The relay never assumes or validates its schema.
JsonBlob: TypeAlias = Any


class ExtractRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    api_key: str | None = Field(
        default=None,
        alias="apiKey",
        description=(
            "Upstream API key. Optional when the relay is configured with a server-side key, "
            "which always wins."
        ),
    )
    payload: JsonBlob = Field(
        default=None,
        description="Messages API request body, forwarded verbatim.",
        examples=[
            {
                "model": "claude-3-5-sonnet-20241022",
                "max_tokens": 1024,
                "messages": [{"role": "user", "content": "Hello"}],
            }
        ],
    )

    @property
    def has_payload(self) -> bool:
        # Falsy scalars (null, false, 0, "") are absent; empty objects and arrays are not.
        if self.payload is None or self.payload is False:
            return False
        if isinstance(self.payload, (str, int, float)):
            return bool(self.payload)
        return True
