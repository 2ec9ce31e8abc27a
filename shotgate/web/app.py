"""FastAPI classification and persistence service for ShotGate."""

import re
import secrets
from typing import List, Optional

from fastapi import FastAPI, File, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from shotgate import constants
from shotgate.errors import InvalidBuffer
from shotgate.imaging.decoder import decode_image
from shotgate.logging import SHOTGATE_LOGGER
from shotgate.quality.heuristic_analyzer import HeuristicAnalyzer
from shotgate.quality.results import DecisionSymbol
from shotgate.settings import ShotGateSettings

# Stored file names keep only a plain alphanumeric extension
_EXTENSION_RE = re.compile(r"\.[A-Za-z0-9]+$")


class QualityMetrics(BaseModel):
    """Pixel statistics reported alongside a classification."""

    blur_variance: float
    overexposed_fraction: float
    underexposed_fraction: float
    mean_brightness: float


class QualityResponse(BaseModel):
    """Classification response body."""

    decision: str
    hints: List[str] = []
    confidence: float
    metrics: Optional[QualityMetrics] = None


class UploadResponse(BaseModel):
    """Persistence response body."""

    stored: bool
    id: Optional[str] = None
    error: Optional[str] = None


class ShotGateWebApp:
    """Web application serving /api/quality and /api/upload."""

    def __init__(self, settings: Optional[ShotGateSettings] = None, logger=SHOTGATE_LOGGER):
        self.settings = settings or ShotGateSettings()
        self.logger = logger
        self.analyzer = HeuristicAnalyzer.from_settings(self.settings)
        self.app = FastAPI(title="ShotGate", description="Photo quality classification and storage")

        # Configure CORS
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        # Register routes
        self._setup_routes()

    async def _read_upload(self, image: Optional[UploadFile]):
        """Return the uploaded bytes, or an error response."""
        if image is None:
            return None, JSONResponse({"error": "missing file"}, status_code=400)
        data = await image.read()
        if len(data) > self.settings.max_upload_bytes:
            return None, JSONResponse({"error": "file too large"}, status_code=413)
        return data, None

    def _setup_routes(self):
        """Setup all API routes."""

        @self.app.get("/health")
        async def health():
            return {"ok": True}

        @self.app.post("/api/quality", response_model=QualityResponse)
        async def quality(image: Optional[UploadFile] = File(None)):
            """Analyse an uploaded image with the pixel heuristic."""
            data, error = await self._read_upload(image)
            if error:
                return error

            try:
                result = self.analyzer.analyze(decode_image(data))
            except InvalidBuffer as e:
                self.logger.error(f"Quality analysis failed for {image.filename!r}: {e}")
                return JSONResponse(
                    {"decision": DecisionSymbol.FAILURE.value, "hints": [constants.HINT_SERVICE_ERROR]},
                    status_code=500,
                )

            confidence = (
                constants.SERVICE_PASS_CONFIDENCE
                if result.decision is DecisionSymbol.PASS
                else constants.SERVICE_OTHER_CONFIDENCE
            )
            self.logger.info(f"Quality check for {image.filename!r}: {result.decision.value}")
            return QualityResponse(
                decision=result.decision.value,
                hints=list(result.hints),
                confidence=confidence,
                metrics=QualityMetrics(**result.metrics.to_dict()),
            )

        @self.app.post("/api/upload", response_model=UploadResponse)
        async def upload(image: Optional[UploadFile] = File(None)):
            """Store an uploaded image and return its identifier."""
            data, error = await self._read_upload(image)
            if error:
                return error

            match = _EXTENSION_RE.search(image.filename or "")
            extension = match.group(0) if match else constants.DEFAULT_UPLOAD_EXTENSION
            storage_id = f"{secrets.token_hex(8)}{extension}"
            try:
                upload_dir = self.settings.upload_dir
                upload_dir.mkdir(parents=True, exist_ok=True)
                (upload_dir / storage_id).write_bytes(data)
            except OSError as e:
                self.logger.error(f"Failed to store upload {image.filename!r}: {e}")
                return JSONResponse({"stored": False, "error": "persist failed"}, status_code=500)

            self.logger.info(f"Stored upload {image.filename!r} as {storage_id}")
            return UploadResponse(stored=True, id=storage_id)
