"""One session iteration: record, transcribe, generate, then resolve and run."""

import logging

from voiceterm.errors import (EmptyInputError, EmptyTranscriptionError, NoChoicesError, RecordingError,
                              RecordingTooShortError, ServiceError, ToolMissingError, VoiceTermError)
from voiceterm.executor import Status, SequenceState, run_sequence
from voiceterm.recorder import artifact_scope

logger = logging.getLogger(__name__)


class Pipeline:
    """Wires the recorder, transcriber and generator together for one iteration at a time."""

    def __init__(self, settings, recorder, transcriber, generator):
        self.settings = settings
        self.recorder = recorder
        self.transcriber = transcriber
        self.generator = generator

    def capture_commands(self):
        """Record, transcribe and generate. The audio file is always discarded afterwards."""
        with artifact_scope(self.settings.recording.output_path):
            print("\n🎤 Recording audio... (press Enter or Ctrl+C to stop)")
            artifact = self.recorder.record()
            print("✅ Audio recording stopped.")
            print("🧠 Transcribing audio...")
            text = self.transcriber.transcribe(artifact, self.settings.transcription.language)
        if not text or not text.strip():
            raise EmptyTranscriptionError()
        text = text.strip()
        print(f"🗣️ You said: {text}")
        print("🤖 Generating command...")
        return self.generator.generate_commands(text)

    def run_iteration(self):
        """Run one full pass. Returns the SequenceResult, or None if nothing was executed."""
        try:
            commands = self.capture_commands()
        except ToolMissingError:
            raise
        except VoiceTermError as e:
            report_error(e)
            return None
        if not commands:
            print("\n⚠️ No command was generated for that request.")
            return None
        print("\n✨ Generated Command:" if len(commands) == 1 else f"\n✨ Generated {len(commands)} Commands:")
        for command in commands:
            print(f"  {command}")
        result = run_sequence(commands, shell=self.settings.shell, confirm=self.settings.confirm)
        print_summary(result)
        return result


def report_error(error):
    """Print a message specific to the kind of failure."""
    logger.debug(f"Iteration aborted: {error!r}")
    if isinstance(error, RecordingTooShortError):
        print("\n⚠️ Recording was too short, no audio was captured. Try speaking for a little longer.")
    elif isinstance(error, RecordingError):
        print(f"\n⚠️ Error recording audio: {error}")
    elif isinstance(error, ServiceError):
        print(f"\n⚠️ {error.service} service error" + (f" (status {error.status})" if error.status is not None else "") + ":")
        print(f"  {error.body}")
    elif isinstance(error, EmptyTranscriptionError):
        print("\n⚠️ Could not understand audio or transcription was empty.")
    elif isinstance(error, EmptyInputError):
        print("\n⚠️ Nothing to generate a command from.")
    elif isinstance(error, NoChoicesError):
        print("\n⚠️ The model returned no suggestions. Try rephrasing the request.")
    else:
        print(f"\n⚠️ {error}")


def print_summary(result):
    if len(result.outcomes) < 2 and result.state is not SequenceState.ABORTED:
        return
    print(f"\nSummary: {result.count(Status.SUCCEEDED)} succeeded, {result.count(Status.FAILED)} failed, "
          f"{result.count(Status.NOT_ATTEMPTED)} not attempted ({result.state.value})")
