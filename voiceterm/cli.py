#!/usr/bin/env python3
"""
VoiceTerm: voice-controlled shell assistant.
Speak a request, review the generated commands, fill in anything missing, run them.
"""

import sys
import logging

from voiceterm.config import build_settings, config_path, load_config, setup_logging
from voiceterm.errors import ToolMissingError
from voiceterm.executor import SequenceState
from voiceterm.generator import CommandGenerator
from voiceterm.pipeline import Pipeline
from voiceterm.recorder import INSTALL_HINT, RecordingController
from voiceterm.transcriber import create_transcriber

logger = logging.getLogger(__name__)


def create_pipeline(settings):
    return Pipeline(
        settings,
        recorder=RecordingController(settings.recording),
        transcriber=create_transcriber(settings),
        generator=CommandGenerator(settings.api, settings.generation_mode),
    )


def session_loop(pipeline, loop=True):
    """Run iterations until the user quits (or once, when looping is off)."""
    while True:
        if loop:
            choice = input("\nPress Enter to record a command, (Q) to quit: ").strip().lower()
            if choice == 'q':
                print("Exiting program.")
                return
        result = pipeline.run_iteration()
        if not loop:
            return result


def run():
    """Load settings, check prerequisites, then hand over to the session loop."""
    config = load_config()
    settings = build_settings(config)
    setup_logging(settings.log_level)
    logger.debug(f"Configuration loaded from {config_path()}")
    if not settings.api.api_key:
        print("Error: OPENAI_API_KEY environment variable not set.")
        print(f"Export it or set api_key under [API] in {config_path()}")
        return 1
    pipeline = create_pipeline(settings)
    try:
        pipeline.recorder.check_tool()
        print("\n✨ VoiceTerm - speak a request and get shell commands")
        result = session_loop(pipeline, settings.loop)
    except ToolMissingError as e:
        print(f"Error: {e}")
        print(INSTALL_HINT)
        return 1
    if result is not None and result.state is SequenceState.ABORTED:
        return 1
    return 0


def main():
    """Main function."""
    try: sys.exit(run())
    except KeyboardInterrupt: print("\nExiting program."); sys.exit(130)
    except Exception as e: print(f"Fatal error: {e}"); import traceback; traceback.print_exc(); sys.exit(1)


if __name__ == "__main__":
    main()
