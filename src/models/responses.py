"""Response model returned by the event pipeline."""

from pydantic import BaseModel, Field


class SinkResponse(BaseModel):
    """HTTP response produced by the gate or the router."""
    status: int = Field(200, description="HTTP status code")
    body: str = Field("", description="Plain-text response body")
    content_type: str = Field("text/plain", description="Response content type")

    @classmethod
    def ok(cls, body: str = "") -> "SinkResponse":
        return cls(status=200, body=body)
