"""
Manual intervention gate.

When a form step has required questions nobody answered, the run blocks on a
gate until a human acknowledges. The gate is the only place the worker waits
on something other than the page.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from easyapply.log import get_logger
from easyapply.models import JobListing

log = get_logger(__name__)


class InterventionDeclined(RuntimeError):
    """Nobody will complete this step; the job should be abandoned."""


@dataclass(frozen=True)
class InterventionRequest:
    listing: JobListing
    reason: str
    fields: tuple[str, ...] = ()
    step: int = 0


class InterventionGate(ABC):
    @abstractmethod
    def await_human_ack(self, request: InterventionRequest) -> None:
        """Block until a human says the step is done, or raise InterventionDeclined."""


class ConsoleGate(InterventionGate):
    """Blocks on stdin with no timeout; one operator supervises one run."""

    def __init__(self, prompt: Callable[[str], str] = input) -> None:
        self._prompt = prompt

    def await_human_ack(self, request: InterventionRequest) -> None:
        listing = request.listing
        print()
        print("  *** MANUAL INTERVENTION REQUIRED ***")
        print(f"  Job:    {listing.title} @ {listing.company} ({listing.provider.value})")
        print(f"  Reason: {request.reason}")
        for name in request.fields:
            print(f"    - {name}")
        print("  Answer the questions in the browser window, then come back here.")
        print()
        try:
            answer = self._prompt("  Press Enter to continue, or type 's' to skip this job: ")
        except EOFError:
            raise InterventionDeclined("no operator available on stdin") from None
        if answer.strip().lower() in ("s", "skip"):
            raise InterventionDeclined("operator skipped the job")
        log.info("Operator acknowledged step %d for %s", request.step, listing)


class AutoApproveGate(InterventionGate):
    """Approves immediately. ``on_request`` can act on the page first."""

    def __init__(self, on_request: Callable[[InterventionRequest], None] | None = None) -> None:
        self.requests: list[InterventionRequest] = []
        self._on_request = on_request

    def await_human_ack(self, request: InterventionRequest) -> None:
        self.requests.append(request)
        if self._on_request is not None:
            self._on_request(request)


class DeclineGate(InterventionGate):
    """For unattended runs: jobs that need a human are failed, not waited on."""

    def await_human_ack(self, request: InterventionRequest) -> None:
        raise InterventionDeclined(
            f"unattended run; needs input for {', '.join(request.fields) or 'required fields'}"
        )
