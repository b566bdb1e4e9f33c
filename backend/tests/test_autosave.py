"""
Tests for the debounced autosave scheduler.
"""

import asyncio

import pytest

from journey_canvas.exceptions import PersistenceCommitFailed
from journey_canvas.session import AutosaveScheduler, CommitTrigger


DELAY = 0.2


class RecordingCommit:
    """Commit callback that records what it was asked to write."""

    def __init__(self):
        self.value = None
        self.commits = []
        self.fail = False

    async def __call__(self, trigger):
        if self.fail:
            raise PersistenceCommitFailed("server unavailable")
        self.commits.append((trigger, self.value))
        return True


@pytest.fixture
def commit():
    return RecordingCommit()


@pytest.fixture
async def scheduler(commit):
    results = []
    sched = AutosaveScheduler(commit, delay=DELAY, on_result=results.append)
    sched.results = results
    yield sched
    await sched.close()


class TestDebounce:
    """Tests for timer behaviour."""

    @pytest.mark.asyncio
    async def test_burst_produces_one_commit_with_last_value(self, scheduler, commit):
        """N changes inside the window commit once, with the last value."""
        for x in range(10):
            commit.value = x
            scheduler.notify_change()
            await asyncio.sleep(DELAY / 10)

        await asyncio.sleep(DELAY * 2)

        assert commit.commits == [(CommitTrigger.AUTOSAVE, 9)]
        assert scheduler.commit_count == 1

    @pytest.mark.asyncio
    async def test_only_one_timer_is_live(self, scheduler):
        scheduler.notify_change()
        first = scheduler._pending
        scheduler.notify_change()
        await asyncio.sleep(DELAY / 10)
        assert first.cancelled()
        assert scheduler.pending

    @pytest.mark.asyncio
    async def test_separate_windows_commit_separately(self, scheduler, commit):
        commit.value = "a"
        scheduler.notify_change()
        await asyncio.sleep(DELAY * 2)
        commit.value = "b"
        scheduler.notify_change()
        await asyncio.sleep(DELAY * 2)
        assert [value for _, value in commit.commits] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_autosave_result_is_silent(self, scheduler):
        scheduler.notify_change()
        await asyncio.sleep(DELAY * 2)
        assert scheduler.last_result.trigger == CommitTrigger.AUTOSAVE
        assert scheduler.last_result.silent


class TestManualSave:
    """Tests for save_now."""

    @pytest.mark.asyncio
    async def test_manual_save_cancels_pending_autosave(self, scheduler, commit):
        """A change, then a manual save, then waiting past the window: one commit."""
        commit.value = "moved"
        scheduler.notify_change()
        await asyncio.sleep(DELAY / 4)

        result = await scheduler.save_now()
        await asyncio.sleep(DELAY * 2)

        assert result.success
        assert not result.silent
        assert commit.commits == [(CommitTrigger.MANUAL, "moved")]
        assert not scheduler.pending

    @pytest.mark.asyncio
    async def test_manual_save_without_changes_still_commits(self, scheduler, commit):
        result = await scheduler.save_now()
        assert result.trigger == CommitTrigger.MANUAL
        assert len(commit.commits) == 1

    @pytest.mark.asyncio
    async def test_nothing_to_commit_is_reported_as_skipped(self):
        async def nothing(trigger):
            return False

        sched = AutosaveScheduler(nothing, delay=DELAY)
        result = await sched.save_now()
        assert result.success
        assert result.skipped
        assert sched.commit_count == 0


class TestFailures:
    """Tests for failed commits."""

    @pytest.mark.asyncio
    async def test_failure_is_reported_not_raised(self, scheduler, commit):
        commit.fail = True
        scheduler.notify_change()
        await asyncio.sleep(DELAY * 2)

        result = scheduler.last_result
        assert not result.success
        assert not result.silent
        assert "server unavailable" in result.error
        assert scheduler.results == [result]

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, scheduler, commit):
        commit.fail = True
        assert not (await scheduler.save_now()).success
        commit.fail = False
        assert (await scheduler.save_now()).success
        assert scheduler.commit_count == 1

    @pytest.mark.asyncio
    async def test_close_cancels_timer(self, scheduler, commit):
        scheduler.notify_change()
        await scheduler.close()
        await asyncio.sleep(DELAY * 2)
        assert commit.commits == []
