"""Shared fixtures for the SpeechDesk test suite.

Provides a scripted ProcessRunner so the probe and the voice loader run
without real binaries, and a recording sleep so retry sequences run
without real timers.
"""

import os
from typing import Dict, List, Sequence, Tuple, Union

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from speechdesk.services.process_runner import ProcessResult


VOICE_LIST_OUTPUT = (
    "Name: en-GB-SoniaNeural, Gender: Female, Language: en-GB\n"
    "Name: de-DE-KatjaNeural, Gender: Female, Language: de-DE\n"
    "Name: en-US-GuyNeural, Gender: Male, Language: en-US\n"
)

Outcome = Union[ProcessResult, BaseException]


class FakeProcessRunner:
    """ProcessRunner stand-in answering from a script keyed by command.

    Each command maps to a list of outcomes consumed in order; the last
    outcome repeats once the list is exhausted. An outcome that is an
    exception is raised instead of returned.
    """

    def __init__(self, script: Dict[Tuple[str, ...], Union[Outcome, List[Outcome]]] = None):
        self.script: Dict[Tuple[str, ...], List[Outcome]] = {}
        self.calls: List[Tuple[Tuple[str, ...], float]] = []
        for command, outcomes in (script or {}).items():
            self.set(command, outcomes)

    def set(self, command: Sequence[str], outcomes: Union[Outcome, List[Outcome]]):
        if not isinstance(outcomes, list):
            outcomes = [outcomes]
        self.script[tuple(command)] = list(outcomes)

    def commands(self) -> List[Tuple[str, ...]]:
        return [command for command, _ in self.calls]

    async def run(self, args: Sequence[str], timeout: float) -> ProcessResult:
        command = tuple(args)
        self.calls.append((command, timeout))
        outcomes = self.script.get(command)
        if not outcomes:
            raise FileNotFoundError(f"[Errno 2] No such file or directory: '{args[0]}'")

        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class RecordingSleep:
    """Awaitable sleep that records requested delays and returns at once."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float):
        self.delays.append(delay)


def ok(stdout: str = "", stderr: str = "") -> ProcessResult:
    return ProcessResult(returncode=0, stdout=stdout, stderr=stderr)


def failed(returncode: int = 1, stderr: str = "") -> ProcessResult:
    return ProcessResult(returncode=returncode, stdout="", stderr=stderr)


@pytest.fixture
def runner():
    return FakeProcessRunner()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()
