"""Capture result model — the buffer handed from the capturer to the persister."""

from __future__ import annotations

import base64
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from drc.constants import MIME_TYPES, ReportFormat


class CaptureResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    format: ReportFormat
    buffer: bytes
    time_created: datetime = Field(default_factory=datetime.now)

    @property
    def payload(self) -> str:
        """The persisted form: a base64 data URI for pdf/png, plain text for csv."""
        if self.format is ReportFormat.CSV:
            return self.buffer.decode("utf-8")
        encoded = base64.b64encode(self.buffer).decode("ascii")
        return f"data:{MIME_TYPES[self.format]};base64,{encoded}"
