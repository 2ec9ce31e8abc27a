"""Per-slot upload lifecycle: select, upload, analyse, result."""

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional

from shotgate import constants
from shotgate.api.abstract_classification_client import AbstractClassificationClient
from shotgate.errors import InvalidBuffer, InvalidTransitionError, ValidationError
from shotgate.imaging.decoder import decode_image, image_size
from shotgate.logging import SHOTGATE_LOGGER
from shotgate.quality.heuristic_analyzer import HeuristicAnalyzer
from shotgate.quality.merge_policy import merge
from shotgate.quality.results import UNAVAILABLE, DecisionSymbol, MergedDecision, Metrics, RemoteOutcome
from shotgate.session.preview import PreviewProvider, TempFilePreviewProvider
from shotgate.session.upload_session import (
    DECISION_STATES,
    SelectedFile,
    SessionState,
    Token,
    UploadSession,
)
from shotgate.settings import ShotGateSettings

# Paced progress steps reported while "uploading"
PROGRESS_STEPS = (25, 50, 75, 100)


@dataclass(frozen=True)
class LifecycleEvent:
    """Snapshot pushed to listeners on every state, progress or hint change."""

    slot: str
    state: SessionState
    hint: Optional[str]
    decision: Optional[DecisionSymbol]
    metrics: Optional[Metrics]
    progress: int
    primary_action: Optional[str]
    storage_id: Optional[str] = None

    @classmethod
    def from_session(cls, session: UploadSession) -> "LifecycleEvent":
        return cls(
            slot=session.slot,
            state=session.state,
            hint=session.hint,
            decision=session.decision,
            metrics=session.metrics,
            progress=session.progress,
            primary_action=session.state.primary_action,
            storage_id=session.storage_id,
        )


class UploadLifecycleController:
    """
    Owns one UploadSession per slot and drives it through the lifecycle.

    Every analysis runs under a fresh Token. A result is applied only while
    its token is still the session's current one; replacing or deleting the
    file invalidates the token and cancels the in-flight remote leg.
    """

    def __init__(
        self,
        settings: Optional[ShotGateSettings] = None,
        classifier: Optional[AbstractClassificationClient] = None,
        preview_provider: Optional[PreviewProvider] = None,
        analyzer: Optional[HeuristicAnalyzer] = None,
        decoder: Callable = decode_image,
        logger=SHOTGATE_LOGGER,
    ):
        """
        Args:
            settings: Validation limits, thresholds and timeouts
            classifier: Remote classification / persistence client (None = heuristic only)
            preview_provider: Creates preview resources for selected files
            analyzer: Heuristic analyzer (built from settings when omitted)
            decoder: Callable turning image bytes into a PixelBuffer
            logger: Logger instance
        """
        self.settings = settings or ShotGateSettings()
        self.classifier = classifier
        self.preview_provider = preview_provider or TempFilePreviewProvider()
        self.analyzer = analyzer or HeuristicAnalyzer.from_settings(self.settings)
        self.decoder = decoder
        self.logger = logger
        self.sessions: dict[str, UploadSession] = {}
        self._listeners: list[Callable[[LifecycleEvent], None]] = []
        self._tip_rotation = 0

    # ------------------------------------------------------------------
    # Sessions and listeners
    # ------------------------------------------------------------------

    def get_session(self, slot: str) -> UploadSession:
        """Return the session for ``slot``, creating an empty one on first use."""
        session = self.sessions.get(slot)
        if session is None:
            session = UploadSession(slot=slot)
            self.sessions[slot] = session
        return session

    def add_listener(self, callback: Callable[[LifecycleEvent], None]):
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[LifecycleEvent], None]):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _emit(self, session: UploadSession):
        event = LifecycleEvent.from_session(session)
        for callback in list(self._listeners):
            try:
                callback(event)
            except Exception as e:
                self.logger.error(f"Lifecycle listener failed for slot {session.slot}: {e}", exc_info=True)

    def _set_state(self, session: UploadSession, state: SessionState):
        if session.state is not state:
            self.logger.debug(f"Slot {session.slot}: {session.state.value} -> {state.value}")
        session.state = state
        self._emit(session)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, upload: SelectedFile):
        """
        Check the basic upload constraints.

        Raises:
            ValidationError: If the file is not an image, is empty, exceeds the
                size ceiling, or is below the configured minimum dimensions
        """
        content_type = (upload.content_type or "").lower()
        if not content_type.startswith("image/") and upload.extension not in constants.IMAGE_EXTENSIONS:
            raise ValidationError(f"{upload.filename!r} is not an image")
        if upload.size == 0:
            raise ValidationError(f"{upload.filename!r} is empty")
        if upload.size > self.settings.max_upload_bytes:
            raise ValidationError(
                f"{upload.filename!r} is {upload.size} bytes; the limit is {self.settings.max_upload_bytes} bytes"
            )

        if self.settings.min_width or self.settings.min_height:
            try:
                width, height = image_size(upload.data)
            except InvalidBuffer:
                # Unreadable headers are reported as FAILED by the analysis step
                return
            if width < self.settings.min_width or height < self.settings.min_height:
                raise ValidationError(
                    f"{upload.filename!r} is {width}x{height}; "
                    f"at least {self.settings.min_width}x{self.settings.min_height} is required"
                )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def select_file(self, slot: str, upload: SelectedFile) -> Optional[SessionState]:
        """
        Run a newly selected file through upload, analysis and result.

        Args:
            slot: Upload slot identifier
            upload: The selected file

        Returns:
            The applied terminal state, or None if the attempt was superseded
            (replaced or deleted) before its result could be applied

        Raises:
            ValidationError: Before any state change, if the file fails validation
            InvalidTransitionError: If the slot is locked
        """
        session = self.get_session(slot)
        if session.state is SessionState.LOCKED:
            raise InvalidTransitionError(f"Slot {slot} is locked")
        self.validate(upload)

        self._invalidate(session)
        self._release_preview(session)
        session.clear_result()
        session.current_upload = upload
        session.preview = self.preview_provider.acquire(upload)
        self.logger.info(f"Slot {slot}: uploading {upload.filename!r} ({upload.size} bytes)")
        self._set_state(session, SessionState.UPLOADING)

        try:
            await self._transfer(session, upload)
            if session.current_upload is not upload:
                self.logger.debug(f"Slot {slot}: {upload.filename!r} superseded during upload")
                return None
            return await self._analyse(session, upload)
        except asyncio.CancelledError:
            # Persistence runs after the result is applied; an accepted slot stays accepted
            if session.current_upload is upload and session.state in (SessionState.UPLOADING, SessionState.ANALYSING):
                self.logger.info(f"Slot {slot}: {upload.filename!r} abandoned by cancellation")
                self._reset(session)
            raise

    async def _transfer(self, session: UploadSession, upload: SelectedFile):
        delay = self.settings.progress_step_delay_seconds
        if delay <= 0:
            session.progress = 100
            self._emit(session)
            return
        for step in PROGRESS_STEPS:
            await asyncio.sleep(delay)
            if session.current_upload is not upload:
                return
            session.progress = step
            self._emit(session)

    async def _analyse(self, session: UploadSession, upload: SelectedFile) -> Optional[SessionState]:
        token = Token.mint()
        session.token = token
        rotation = self._tip_rotation
        self._tip_rotation += 1
        self._set_state(session, SessionState.ANALYSING)

        if self.classifier is not None:
            session.remote_task = asyncio.create_task(self._classify(upload))
        remote_task = session.remote_task

        try:
            buffer = self.decoder(upload.data)
            heuristic = self.analyzer.analyze(buffer)
        except InvalidBuffer as e:
            self.logger.warning(f"Slot {session.slot}: could not analyse {upload.filename!r}: {e}")
            if remote_task is not None:
                remote_task.cancel()
            failed = MergedDecision(decision=DecisionSymbol.FAILURE, hint=constants.HINT_UNREADABLE_IMAGE)
            return session.state if self.apply_result(session.slot, token, failed) else None

        remote = await self._await_remote(remote_task)
        if session.token != token:
            self.logger.debug(f"Slot {session.slot}: discarding stale analysis (token {token})")
            return None

        merged = merge(heuristic, remote, rotation)
        if not self.apply_result(session.slot, token, merged, heuristic.metrics):
            return None

        state = session.state
        if state is SessionState.ACCEPTED and self.settings.persist_accepted and self.classifier is not None:
            await self._persist(session, upload)
        return state

    async def _classify(self, upload: SelectedFile) -> RemoteOutcome:
        return await self.classifier.classify(
            upload.data,
            timeout=self.settings.request_timeout_seconds,
            filename=upload.filename,
            content_type=upload.content_type,
        )

    async def _await_remote(self, remote_task: Optional[asyncio.Task]) -> RemoteOutcome:
        """Wait for the remote leg; cancellation and crashes count as UNAVAILABLE."""
        if remote_task is None:
            return UNAVAILABLE
        try:
            await asyncio.wait({remote_task})
        except asyncio.CancelledError:
            remote_task.cancel()
            raise
        if remote_task.cancelled():
            return UNAVAILABLE
        exc = remote_task.exception()
        if exc is not None:
            self.logger.warning(f"Remote classification failed: {exc!r}")
            return UNAVAILABLE
        return remote_task.result()

    async def _persist(self, session: UploadSession, upload: SelectedFile):
        try:
            storage_id = await self.classifier.persist(upload.data, filename=upload.filename, content_type=upload.content_type)
        except Exception as e:
            self.logger.error(f"Slot {session.slot}: persisting accepted image failed: {e}", exc_info=True)
            return
        if storage_id is None:
            self.logger.error(f"Slot {session.slot}: accepted image was not persisted")
            return
        if session.current_upload is not upload:
            self.logger.debug(f"Slot {session.slot}: dropping storage id for a replaced image")
            return
        session.storage_id = storage_id
        self.logger.info(f"Slot {session.slot}: stored accepted image as {storage_id}")
        self._emit(session)

    def apply_result(
        self, slot: str, token: Token, merged: MergedDecision, metrics: Optional[Metrics] = None
    ) -> bool:
        """
        Apply a merged decision computed under ``token``.

        Returns:
            True if applied; False (no mutation) when ``token`` is no longer current
        """
        session = self.sessions.get(slot)
        if session is None or session.state is not SessionState.ANALYSING or session.token != token:
            self.logger.debug(f"Slot {slot}: discarding stale result (token {token})")
            return False

        session.token = None
        session.remote_task = None
        session.decision = merged.decision
        session.hint = merged.hint
        session.metrics = metrics
        state = DECISION_STATES[merged.decision]
        self.logger.info(f"Slot {slot}: {state.value} ({merged.hint})")
        self._set_state(session, state)
        return True

    def confirm(self, slot: str):
        """Lock an accepted slot."""
        session = self.get_session(slot)
        if session.state is not SessionState.ACCEPTED:
            raise InvalidTransitionError(f"Slot {slot} cannot be confirmed from {session.state.value}")
        self._set_state(session, SessionState.LOCKED)

    def delete(self, slot: str):
        """Return a slot to EMPTY, abandoning any in-flight analysis."""
        session = self.get_session(slot)
        if session.state is SessionState.LOCKED:
            raise InvalidTransitionError(f"Slot {slot} is locked")
        self.logger.info(f"Slot {slot}: deleted")
        self._reset(session)

    def close(self):
        """Cancel in-flight work and release every preview."""
        for session in self.sessions.values():
            self._invalidate(session)
            self._release_preview(session)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _invalidate(self, session: UploadSession):
        session.token = None
        task = session.remote_task
        session.remote_task = None
        if task is not None and not task.done():
            task.cancel()

    def _reset(self, session: UploadSession):
        self._invalidate(session)
        self._release_preview(session)
        session.current_upload = None
        session.clear_result()
        self._set_state(session, SessionState.EMPTY)

    def _release_preview(self, session: UploadSession):
        preview = session.preview
        session.preview = None
        if preview is not None:
            preview.release()
