from shotgate.session.lifecycle_controller import LifecycleEvent, UploadLifecycleController
from shotgate.session.preview import PreviewHandle, PreviewProvider, TempFilePreviewProvider
from shotgate.session.upload_session import SelectedFile, SessionState, Token, UploadSession

__all__ = [
    "LifecycleEvent",
    "PreviewHandle",
    "PreviewProvider",
    "SelectedFile",
    "SessionState",
    "TempFilePreviewProvider",
    "Token",
    "UploadLifecycleController",
    "UploadSession",
]
