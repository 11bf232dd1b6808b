"""Exceptions raised along the voice-to-command pipeline."""


class VoiceTermError(Exception):
    """Base class for every error the pipeline reports to the user."""


class ToolMissingError(VoiceTermError):
    """Raised when the external recording tool is not on PATH."""

    def __init__(self, tool):
        self.tool = tool
        super().__init__(f"Recording tool '{tool}' was not found on PATH")


class RecordingError(VoiceTermError):
    """Raised when the recording subprocess cannot be started or fails."""


class RecordingTooShortError(RecordingError):
    """Raised when recording stopped before any audio was written."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"No audio was captured to '{path}'")


class ServiceError(VoiceTermError):
    """Raised when a remote service call fails or returns an unusable payload."""

    def __init__(self, service, status=None, body=""):
        self.service = service
        self.status = status
        self.body = body
        if status is None:
            super().__init__(f"{service} request failed: {body}")
        else:
            super().__init__(f"{service} request failed with status {status}: {body}")


class EmptyTranscriptionError(VoiceTermError):
    """Raised when the transcription came back empty."""

    def __init__(self):
        super().__init__("Transcription was empty")


class EmptyInputError(VoiceTermError):
    """Raised when command generation is asked for with no text."""

    def __init__(self):
        super().__init__("Nothing to generate commands from")


class NoChoicesError(VoiceTermError):
    """Raised when the completion service returned no choices."""

    def __init__(self):
        super().__init__("Completion service returned no choices")
