import asyncio
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath
from typing import TYPE_CHECKING, Optional

from shotgate import constants
from shotgate.quality.results import DecisionSymbol, Metrics

if TYPE_CHECKING:
    from shotgate.session.preview import PreviewHandle


class SessionState(Enum):
    EMPTY = "empty"
    UPLOADING = "uploading"
    ANALYSING = "analysing"
    ACCEPTED = "accepted"
    NEEDS_RETAKE = "needs_retake"
    NEEDS_RETRY = "needs_retry"
    FAILED = "failed"
    LOCKED = "locked"

    @property
    def primary_action(self) -> Optional[str]:
        return constants.PRIMARY_ACTION_LABELS[self.value]


# Merged decision -> terminal state
DECISION_STATES = {
    DecisionSymbol.PASS: SessionState.ACCEPTED,
    DecisionSymbol.IMPROVE: SessionState.NEEDS_RETAKE,
    DecisionSymbol.RETRY: SessionState.NEEDS_RETRY,
    DecisionSymbol.FAILURE: SessionState.FAILED,
}


@dataclass(frozen=True)
class Token:
    """Identity of one analysis attempt; compared by value."""

    value: str

    @classmethod
    def mint(cls) -> "Token":
        return cls(uuid.uuid4().hex)

    def __str__(self):
        return self.value[:8]


@dataclass(frozen=True, eq=False)
class SelectedFile:
    """A file picked by the user, before validation."""

    filename: str
    content_type: Optional[str]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return PurePath(self.filename or "").suffix.lower()


@dataclass
class UploadSession:
    slot: str
    state: SessionState = SessionState.EMPTY
    token: Optional[Token] = None
    preview: Optional["PreviewHandle"] = None
    metrics: Optional[Metrics] = None
    hint: Optional[str] = None
    decision: Optional[DecisionSymbol] = None
    storage_id: Optional[str] = None
    progress: int = 0

    # Local execution state (owned by the controller, not part of the presented session)
    current_upload: Optional[SelectedFile] = field(default=None, repr=False)
    remote_task: Optional[asyncio.Task] = field(default=None, repr=False)

    def clear_result(self):
        """Drop everything derived from a previous file."""
        self.metrics = None
        self.hint = None
        self.decision = None
        self.storage_id = None
        self.progress = 0

    def to_dict(self) -> dict:
        return {
            "slot": self.slot,
            "state": self.state.value,
            "hint": self.hint,
            "decision": self.decision.value if self.decision else None,
            "metrics": self.metrics.to_dict() if self.metrics else None,
            "storage_id": self.storage_id,
            "progress": self.progress,
            "primary_action": self.state.primary_action,
            "preview_path": str(self.preview.path) if self.preview and not self.preview.released else None,
        }
