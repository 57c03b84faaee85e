"""Tests for the draft registry."""

from __future__ import annotations

from server.drafts import DraftRegistry


class Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestExpiry:
    """Idle drafts are discarded on the next access."""

    def test_idle_draft_is_dropped(self) -> None:
        clock = Clock()
        drafts = DraftRegistry(ttl_s=60, clock=clock)
        stale_id, _ = drafts.create()

        clock.now = 30
        fresh_id, _ = drafts.create()
        clock.now = 61

        assert drafts.get(stale_id) is None
        assert drafts.get(fresh_id) is not None
        assert len(drafts) == 1

    def test_access_keeps_draft_alive(self) -> None:
        clock = Clock()
        drafts = DraftRegistry(ttl_s=60, clock=clock)
        draft_id, wizard = drafts.create()

        for now in (50, 100, 150):
            clock.now = now
            assert drafts.get(draft_id) is wizard

    def test_finishing_draft_is_never_dropped(self) -> None:
        clock = Clock()
        drafts = DraftRegistry(ttl_s=60, clock=clock)
        draft_id, _ = drafts.create()
        drafts.begin_finish(draft_id)

        clock.now = 1000
        assert drafts.get(draft_id) is not None


class TestFinishClaim:
    """Only one finish may run per draft."""

    def test_second_claim_is_refused_until_released(self) -> None:
        drafts = DraftRegistry()
        draft_id, _ = drafts.create()

        assert drafts.begin_finish(draft_id)
        assert not drafts.begin_finish(draft_id)

        drafts.end_finish(draft_id)
        assert drafts.begin_finish(draft_id)

    def test_unknown_draft_cannot_be_claimed(self) -> None:
        drafts = DraftRegistry()
        assert not drafts.begin_finish("missing")
        drafts.end_finish("missing")
