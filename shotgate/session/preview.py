"""Previewable resources held by an upload session."""

import logging
import tempfile
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from shotgate import constants
from shotgate.imaging.converter import convert_to_preview_bytes
from shotgate.session.upload_session import SelectedFile

logger = logging.getLogger(__name__)


class PreviewHandle:
    """One live preview file. ``release`` is safe to call more than once."""

    def __init__(self, path: Path):
        self.path = path
        self.released = False

    def release(self):
        if self.released:
            return
        self.released = True
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove preview {self.path}: {e}")

    def __repr__(self):
        return f"PreviewHandle({self.path.name!r}, released={self.released})"


class PreviewProvider(ABC):
    """Creates preview resources for selected files."""

    @abstractmethod
    def acquire(self, upload: SelectedFile) -> PreviewHandle:
        """Create a new preview for ``upload``; each call yields a distinct resource."""
        pass


class TempFilePreviewProvider(PreviewProvider):
    """Writes PNG thumbnails into a private temporary directory."""

    def __init__(self, directory: Optional[Path] = None, max_width: int = constants.PREVIEW_MAX_WIDTH):
        self.directory = Path(directory) if directory else Path(tempfile.mkdtemp(prefix="shotgate-preview-"))
        self.directory.mkdir(parents=True, exist_ok=True)
        self.max_width = max_width

    def acquire(self, upload: SelectedFile) -> PreviewHandle:
        png = convert_to_preview_bytes(upload.data, self.max_width)
        if png is not None:
            path = self.directory / f"{uuid.uuid4().hex}.png"
            path.write_bytes(png)
        else:
            # Undecodable uploads still get a resource so the user sees what they picked
            path = self.directory / f"{uuid.uuid4().hex}{upload.extension or constants.DEFAULT_UPLOAD_EXTENSION}"
            path.write_bytes(upload.data)
        return PreviewHandle(path)
