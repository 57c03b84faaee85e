"""In-process store of onboarding drafts."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import Callable

from backlogiq.config import BACKLOGIQ_DRAFT_TTL_S
from backlogiq.onboarding import OnboardingWizard
from backlogiq.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class _Draft:
    wizard: OnboardingWizard
    touched_at: float
    finishing: bool = False


class DraftRegistry:
    """Owns every wizard currently being edited, keyed by draft id.

    A draft that has not been read or edited for ``ttl_s`` seconds counts as
    abandoned and is dropped on the next registry access. Drafts in the middle
    of a finish are never dropped.

    Args:
        ttl_s: Idle time after which a draft is discarded.
        clock: Monotonic time source, in seconds.
    """

    def __init__(
        self,
        ttl_s: float = BACKLOGIQ_DRAFT_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_s = ttl_s
        self._clock = clock
        self._drafts: dict[str, _Draft] = {}

    def create(self) -> tuple[str, OnboardingWizard]:
        self._evict_idle()
        draft_id = uuid.uuid4().hex
        wizard = OnboardingWizard()
        self._drafts[draft_id] = _Draft(wizard, self._clock())
        return draft_id, wizard

    def get(self, draft_id: str) -> OnboardingWizard | None:
        """Return the draft's wizard and mark it as used, or None if unknown."""
        self._evict_idle()
        draft = self._drafts.get(draft_id)
        if draft is None:
            return None
        draft.touched_at = self._clock()
        return draft.wizard

    def discard(self, draft_id: str) -> None:
        self._drafts.pop(draft_id, None)

    def begin_finish(self, draft_id: str) -> bool:
        """Claim the draft for a finish; False if another finish holds it."""
        draft = self._drafts.get(draft_id)
        if draft is None or draft.finishing:
            return False
        draft.finishing = True
        return True

    def end_finish(self, draft_id: str) -> None:
        draft = self._drafts.get(draft_id)
        if draft is not None:
            draft.finishing = False
            draft.touched_at = self._clock()

    def _evict_idle(self) -> None:
        cutoff = self._clock() - self.ttl_s
        idle = [
            draft_id
            for draft_id, draft in self._drafts.items()
            if draft.touched_at <= cutoff and not draft.finishing
        ]
        for draft_id in idle:
            del self._drafts[draft_id]
        if idle:
            logger.info("Discarded abandoned drafts", extra={"count": len(idle)})

    def __len__(self) -> int:
        return len(self._drafts)
