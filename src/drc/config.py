"""YAML request loader — reads a report request file into ReportRequest."""

from pathlib import Path
from typing import Any

import yaml

from drc.schemas.request import ReportRequest


def load_request(path: str | Path | None = None, **overrides: Any) -> ReportRequest:
    """Build a ReportRequest from an optional YAML file plus overrides.

    Overrides whose value is ``None`` are ignored, so unset CLI options
    fall through to the file (and then to the model defaults).

    Raises ``FileNotFoundError`` if the path doesn't exist and
    ``pydantic.ValidationError`` if the merged values are invalid.
    """
    raw: dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Request file not found: {path}")

        loaded = yaml.safe_load(path.read_text())
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Request file must be a YAML mapping, got {type(loaded).__name__}")
        # YAML spells the option with a dash on the CLI side; accept both.
        raw = {key.replace("-", "_"): value for key, value in loaded.items()}

    raw.update({key: value for key, value in overrides.items() if value is not None})
    return ReportRequest(**raw)


def split_credentials(credentials: str | None) -> tuple[str | None, str | None]:
    """Split ``user:password`` (the password may itself contain colons)."""
    if not credentials:
        return None, None
    username, sep, password = credentials.partition(":")
    if not sep:
        raise ValueError("Credentials must be given as username:password")
    return username, password
