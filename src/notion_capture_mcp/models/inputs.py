"""Input-side models: attached files, the input bundle, and target connections."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, Field


@dataclass
class InputFile:
    """One attached file. ``public_url`` is set once the upload side-channel succeeds."""

    name: str
    mime_type: str
    data: bytes = field(repr=False)
    public_url: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class InputBundle:
    """Raw text plus the ordered list of attached files."""

    text: str = ""
    files: list[InputFile] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.text.strip() and not self.files


class TargetConnection(BaseModel):
    """Credentials and identifier for one Notion database."""

    id: str
    name: str
    api_key: str = Field(repr=False)
    database_id: str
    system_prompt: str | None = Field(
        default=None,
        description="Per-connection override of the instruction prompt",
    )

    def redacted(self) -> dict:
        """Serialisable view with the API key reduced to its last 4 chars."""
        data = self.model_dump(exclude={"api_key"})
        data["api_key"] = f"…{self.api_key[-4:]}" if self.api_key else ""
        return data
