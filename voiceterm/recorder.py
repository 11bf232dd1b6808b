"""
Microphone capture through SoX's `rec`.

The recording runs as a child process. While the main thread waits for it to
exit, one listener thread watches for the user pressing Enter and for a stop
request raised by SIGINT/SIGTERM. Whichever comes first is forwarded to the
child as SIGINT so it can finish writing the WAV file.
"""

import os
import sys
import time
import select
import shutil
import signal
import logging
import threading
import subprocess
from contextlib import contextmanager
from dataclasses import dataclass, field

from voiceterm.errors import RecordingError, RecordingTooShortError, ToolMissingError

logger = logging.getLogger(__name__)

INSTALL_HINT = ("SoX is not installed. Please install it to use this tool "
                "(macOS: 'brew install sox', Debian/Ubuntu: 'sudo apt install sox').")
POLL_INTERVAL = 0.1
# rec writes the RIFF header as soon as it starts, before any samples.
WAV_HEADER_SIZE = 44


@dataclass
class AudioArtifact:
    path: str

    @property
    def exists(self):
        return os.path.isfile(self.path) and os.path.getsize(self.path) > WAV_HEADER_SIZE


@dataclass
class RecordingHandle:
    process: subprocess.Popen
    path: str
    stop_requested: threading.Event = field(default_factory=threading.Event)
    finished: threading.Event = field(default_factory=threading.Event)
    listener: threading.Thread = None
    previous_handlers: dict = field(default_factory=dict)


def discard_artifact(path):
    """Remove the audio file for this iteration; a missing file is fine."""
    try:
        os.remove(path)
        logger.debug(f"Removed audio file {path}")
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove audio file {path}: {e}")


@contextmanager
def artifact_scope(path):
    """Guarantee the audio file at `path` is discarded when the block exits."""
    try:
        yield path
    finally:
        discard_artifact(path)


class RecordingController:
    """Start/stop control around the external recording tool."""

    def __init__(self, settings, input_stream=None):
        self.settings = settings
        self.input_stream = input_stream if input_stream is not None else sys.stdin
        self._keys_closed = False

    def check_tool(self):
        """Return the resolved path of the recording tool or raise ToolMissingError."""
        resolved = shutil.which(self.settings.tool)
        if not resolved:
            raise ToolMissingError(self.settings.tool)
        return resolved

    def build_command(self, path):
        s = self.settings
        cmd = [s.tool, "-c", str(s.channels), "-r", str(s.rate), "-V1", path]
        if s.silence_stop:
            # Stop on its own after `silence_duration` seconds below threshold.
            cmd += ["silence", "1", "0.1", s.silence_threshold, "1", str(s.silence_duration), s.silence_threshold]
        return cmd

    def start(self):
        """Launch the recording tool and the stop-trigger listener."""
        self.check_tool()
        path = self.settings.output_path
        if os.path.exists(path):
            logger.info(f"Removing stale audio file {path}")
            discard_artifact(path)
        cmd = self.build_command(path)
        logger.debug(f"Starting recorder: {' '.join(cmd)}")
        try:
            process = subprocess.Popen(cmd, stdin=subprocess.DEVNULL)
        except OSError as e:
            raise RecordingError(f"Could not start recording: {e}") from e
        handle = RecordingHandle(process=process, path=path)
        self._install_signal_handlers(handle)
        self._keys_closed = False
        handle.listener = threading.Thread(target=self._listen, args=(handle,), name="voiceterm-stop-listener", daemon=True)
        handle.listener.start()
        logger.info(f"Recording to {path} (pid {process.pid})")
        return handle

    def stop(self, handle):
        """Block until the recorder exits, then hand back the captured audio."""
        try:
            returncode = handle.process.wait()
        finally:
            handle.finished.set()
            if handle.listener is not None:
                handle.listener.join()
            self._restore_signal_handlers(handle)
        logger.info(f"Recorder exited with status {returncode}")
        if returncode != 0 and not handle.stop_requested.is_set():
            raise RecordingError(f"Recording tool exited with status {returncode}")
        artifact = AudioArtifact(handle.path)
        if not artifact.exists:
            raise RecordingTooShortError(handle.path)
        return artifact

    def record(self):
        return self.stop(self.start())

    def _listen(self, handle):
        while not handle.finished.is_set():
            if not handle.stop_requested.is_set() and self._key_pressed(POLL_INTERVAL):
                handle.stop_requested.set()
            if handle.stop_requested.is_set():
                if handle.process.poll() is None:
                    logger.debug(f"Sending SIGINT to recorder pid {handle.process.pid}")
                    handle.process.send_signal(signal.SIGINT)
                return

    def _key_pressed(self, timeout):
        """Wait up to `timeout` seconds for a line on the input stream."""
        if self._keys_closed:
            time.sleep(timeout)
            return False
        try:
            ready, _, _ = select.select([self.input_stream], [], [], timeout)
        except (OSError, ValueError):
            # No selectable stdin (captured or closed); rely on signals only.
            self._keys_closed = True
            return False
        if not ready:
            return False
        if not self.input_stream.readline():
            self._keys_closed = True
            return False
        return True

    def _install_signal_handlers(self, handle):
        if threading.current_thread() is not threading.main_thread():
            return

        def request_stop(signum, frame):
            logger.debug(f"Received signal {signum}, stopping recording")
            handle.stop_requested.set()

        for signum in (signal.SIGINT, signal.SIGTERM):
            handle.previous_handlers[signum] = signal.signal(signum, request_stop)

    def _restore_signal_handlers(self, handle):
        for signum, previous in handle.previous_handlers.items():
            if previous is not None:
                signal.signal(signum, previous)
        handle.previous_handlers.clear()
