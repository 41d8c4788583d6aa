"""Exception hierarchy for ingestion, batch runs and synthesis calls."""


class ScriptVoicerError(Exception):
    """Base class for every error raised by script_voicer."""


class BatchError(ScriptVoicerError):
    """Batch-level problem, raised before any item is processed."""


class NoValidRowsError(BatchError):
    def __init__(self, message: str = "No valid rows found in script. "
                 "Ensure headers: 'Shot Number', 'Character', 'voice_id', 'text'."):
        super().__init__(message)


class MissingCredentialsError(BatchError):
    def __init__(self, message: str = "Please provide API Key and Group ID."):
        super().__init__(message)


class BatchAlreadyRunningError(BatchError):
    def __init__(self, message: str = "A batch run is already in progress."):
        super().__init__(message)


class SynthesisError(ScriptVoicerError):
    """A single synthesis call failed. Caught per item by the scheduler."""


class TransportError(SynthesisError):
    """The synthesis request did not complete with a 2xx status."""

    def __init__(self, status_code: int | None, reason: str):
        self.status_code = status_code
        self.reason = reason
        if status_code is None:
            super().__init__(f"API Error: {reason}")
        else:
            super().__init__(f"API Error: {status_code} {reason}".rstrip())


class ServiceError(SynthesisError):
    """The service answered 2xx but reported a failure in ``base_resp``."""

    def __init__(self, status_code: int | None, status_msg: str):
        self.status_code = status_code
        self.status_msg = status_msg
        super().__init__(f"Minimax Error: {status_msg}")


class DecodeError(SynthesisError):
    """Inline audio was not a contiguous string of hex pairs."""


class NoAudioDataError(SynthesisError):
    def __init__(self, message: str = "No audio data received in response"):
        super().__init__(message)


class SecondaryFetchError(SynthesisError):
    """Fetching the ``audio_file`` URL failed."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        self.url = url
        self.status_code = status_code
        self.reason = reason
        if status_code is None:
            super().__init__(f"Audio download failed: {reason}")
        else:
            super().__init__(f"Audio download failed: {status_code} {reason}".rstrip())
