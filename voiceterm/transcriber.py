"""Speech-to-text backends: the OpenAI transcription API or a local Whisper model."""

import os
import time
import logging
import requests

from voiceterm.errors import ServiceError

logger = logging.getLogger(__name__)

whisper_model = None


class OpenAITranscriber:
    """Uploads the recorded WAV to the transcription endpoint."""

    name = "Transcription"

    def __init__(self, api_settings):
        self.api = api_settings

    def transcribe(self, artifact, language=""):
        headers = {"Authorization": f"Bearer {self.api.api_key}"}
        data = {"model": self.api.transcription_model}
        if language:
            data["language"] = language
        start_time = time.time()
        try:
            with open(artifact.path, 'rb') as audio_file:
                files = {"file": (os.path.basename(artifact.path), audio_file, "audio/wav")}
                response = requests.post(self.api.transcription_endpoint, headers=headers, data=data,
                                         files=files, timeout=self.api.timeout)
        except OSError as e:
            raise ServiceError(self.name, body=f"could not read audio file: {e}") from e
        except requests.exceptions.RequestException as e:
            raise ServiceError(self.name, body=str(e)) from e
        logger.info(f"Transcription request took {time.time() - start_time:.2f} seconds")
        if not 200 <= response.status_code < 300:
            raise ServiceError(self.name, response.status_code, response.text)
        try:
            text = response.json()["text"]
        except (ValueError, KeyError, TypeError) as e:
            raise ServiceError(self.name, response.status_code, response.text) from e
        if not isinstance(text, str):
            raise ServiceError(self.name, response.status_code, response.text)
        return text


def load_whisper_model(model_size):
    """Lazy load the Whisper model only when needed."""
    global whisper_model
    if whisper_model is None:
        import whisper
        logger.info(f"Loading Whisper '{model_size}' model...")
        whisper_model = whisper.load_model(model_size)
        logger.info("Whisper model loaded successfully")
    return whisper_model


class WhisperTranscriber:
    """Transcribes locally with openai-whisper; nothing leaves the machine."""

    name = "Whisper"

    def __init__(self, model_size):
        self.model_size = model_size

    def transcribe(self, artifact, language=""):
        try:
            model = load_whisper_model(self.model_size)
            start_time = time.time()
            result = model.transcribe(artifact.path, language=language or None, fp16=False)
        except ImportError as e:
            raise ServiceError(self.name, body="openai-whisper is not installed (pip install 'voiceterm[local]')") from e
        except Exception as e:
            raise ServiceError(self.name, body=str(e)) from e
        logger.info(f"Local transcription took {time.time() - start_time:.2f} seconds")
        return result.get("text", "")


def create_transcriber(settings):
    """Pick the transcription backend named in the settings."""
    if settings.transcription.backend == "whisper":
        return WhisperTranscriber(settings.transcription.whisper_model)
    return OpenAITranscriber(settings.api)
