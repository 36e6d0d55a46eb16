"""Write-once artifact output."""

from __future__ import annotations

import base64
import logging
from pathlib import Path

from drc.constants import ReportFormat
from drc.errors import DestinationExistsError
from drc.schemas.capture import CaptureResult

logger = logging.getLogger(__name__)

DATA_URI_MARKER = ";base64,"


def ensure_writable(path: str | Path) -> Path:
    """Raise ``DestinationExistsError`` if something already lives at ``path``."""
    path = Path(path)
    if path.exists():
        raise DestinationExistsError(path)
    return path


def write_artifact(payload: str, filename: str | Path, fmt: ReportFormat) -> Path:
    """Write ``payload`` to ``filename``, never replacing an existing file.

    PDF and PNG payloads are base64, optionally behind a data-URI prefix;
    they are decoded before the file is created. CSV payloads are written
    as text. A write that fails part way removes what it wrote and
    re-raises the ``OSError``.
    """
    path = ensure_writable(filename)

    if fmt in (ReportFormat.PDF, ReportFormat.PNG):
        data: bytes | str = base64.b64decode(payload.split(DATA_URI_MARKER)[-1])
        mode = "xb"
        encoding = None
    else:
        data = payload
        mode = "x"
        encoding = "utf-8"

    # Exclusive create: a file that appeared after the check above still wins.
    try:
        fh = open(path, mode, encoding=encoding)
    except FileExistsError:
        raise DestinationExistsError(path) from None
    try:
        with fh:
            fh.write(data)
    except OSError:
        path.unlink(missing_ok=True)
        raise

    logger.info("Wrote %s artifact to %s", fmt.value, path)
    return path


def persist(result: CaptureResult, filename: str | Path) -> Path:
    return write_artifact(result.payload, filename, result.format)
