"""
Ordered fan-out over backend replicas: first success wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from gateway.backend_client import AttemptFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")

Attempt = Callable[[str, str], Awaitable[object]]


def order_candidates(backends: Sequence[str], preferred: Optional[str]) -> list[str]:
    """
    Put the preferred backend first when it exactly matches a configured URL.
    Unknown hints are ignored and the configured order is kept.
    """
    candidates = list(backends)
    if not preferred:
        return candidates
    if preferred not in candidates:
        logger.info(
            "Preferred backend %s is not configured; using default order.", preferred
        )
        return candidates
    return [preferred] + [url for url in candidates if url != preferred]


def role_for(index: int) -> str:
    return "primary" if index == 0 else "fallback"


@dataclass
class FanoutResult(Generic[T]):
    success: Optional[T] = None
    failures: list[AttemptFailure] = field(default_factory=list)
    attempted: list[str] = field(default_factory=list)

    @property
    def last_failure(self) -> Optional[AttemptFailure]:
        return self.failures[-1] if self.failures else None


async def first_success(
    candidates: Sequence[str], attempt: Attempt, *, operation: str
) -> FanoutResult:
    """
    Try each candidate in turn until one returns something other than an
    AttemptFailure. Attempts are sequential; the next candidate is only
    contacted after the previous one has definitively failed.
    """
    result: FanoutResult = FanoutResult()
    for index, url in enumerate(candidates):
        if index > 0:
            logger.info(
                "%s via %s failed, trying fallback backend %s.",
                operation,
                candidates[index - 1],
                url,
            )
        result.attempted.append(url)
        outcome = await attempt(url, role_for(index))
        if isinstance(outcome, AttemptFailure):
            result.failures.append(outcome)
            continue
        result.success = outcome
        return result

    if len(candidates) == 1:
        logger.info(
            "%s via %s failed, and no alternative backend is configured.",
            operation,
            candidates[0],
        )
    return result
