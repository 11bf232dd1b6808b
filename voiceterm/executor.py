"""
Running generated commands one after another.

Each command is resolved (placeholders filled) right before it runs, shown to
the user, optionally confirmed, and executed through the shell with the
terminal attached. A failed command asks whether to carry on; anything but
"y" stops the sequence and the remaining commands are not attempted.
"""

import time
import signal
import logging
import subprocess
from enum import Enum
from dataclasses import dataclass

from voiceterm import placeholders

logger = logging.getLogger(__name__)


class Status(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    NOT_ATTEMPTED = "not attempted"


class SequenceState(Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"
    CANCELLED = "cancelled"


@dataclass
class ExecutionOutcome:
    command: str
    status: Status
    returncode: int = None
    error: str = None

    @property
    def succeeded(self):
        return self.status is Status.SUCCEEDED


@dataclass
class SequenceResult:
    outcomes: list
    state: SequenceState

    def count(self, status):
        return sum(1 for o in self.outcomes if o.status is status)


def execute_command(command, shell="/bin/sh"):
    """Run one command line through the shell with stdin/stdout/stderr attached."""
    start_time = time.time()
    try:
        process = subprocess.Popen([shell, "-c", command])
    except OSError as e:
        logger.error(f"Could not start shell '{shell}': {e}")
        return ExecutionOutcome(command, Status.FAILED, error=str(e))
    try:
        returncode = process.wait()
    except KeyboardInterrupt:
        print("\n\n⚠️ Command execution interrupted by user")
        process.terminate()
        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
        logger.info(f"Command interrupted after {time.time() - start_time:.2f} seconds")
        return ExecutionOutcome(command, Status.FAILED, returncode=-int(signal.SIGINT))
    logger.info(f"Command exited with status {returncode} after {time.time() - start_time:.2f} seconds")
    status = Status.SUCCEEDED if returncode == 0 else Status.FAILED
    return ExecutionOutcome(command, status, returncode=returncode)


def ask_yes_no(question):
    """True only for an explicit 'y' / 'yes'."""
    return input(question).strip().lower() in ('y', 'yes')


def run_sequence(commands, shell="/bin/sh", confirm=True):
    """Execute commands in order, applying the continue/abort policy on failure."""
    outcomes = []
    state = SequenceState.RUNNING
    total = len(commands)
    for i, command in enumerate(commands, 1):
        if state is not SequenceState.RUNNING:
            outcomes.append(ExecutionOutcome(command, Status.NOT_ATTEMPTED))
            continue
        if total > 1:
            print(f"\nStep {i}/{total}: {command}")
        resolved = placeholders.resolve(command)
        if resolved != command:
            print(f"\n✨ Command: {resolved}")
        if confirm and not ask_yes_no("\nExecute this command? (y/N): "):
            print("Execution cancelled.")
            outcomes.append(ExecutionOutcome(resolved, Status.NOT_ATTEMPTED))
            state = SequenceState.CANCELLED
            continue
        print("\n🚀 Executing command...")
        outcome = execute_command(resolved, shell)
        outcomes.append(outcome)
        if outcome.succeeded:
            continue
        if outcome.error:
            print(f"\n⚠️ Error executing command: {outcome.error}")
        else:
            print(f"\n⚠️ Command failed with exit status {outcome.returncode}")
        if i < total and ask_yes_no("Continue with next command? (y/N): "):
            continue
        state = SequenceState.ABORTED
    if state is SequenceState.RUNNING:
        state = SequenceState.COMPLETED
    return SequenceResult(outcomes, state)
