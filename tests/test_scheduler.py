"""Tests for the periodic refresh jobs."""

from apscheduler.triggers.cron import CronTrigger

from errors import UpstreamUnavailableError
from services.cache import build_caches
from services.scheduler import create_scheduler, run_refresh_job
from tests.fakes import FakeUpstream


class TestScheduler:
    """Tests for job registration and execution."""

    def test_registers_one_job_per_slot(self, test_settings, upstream: FakeUpstream) -> None:
        """Test that both slots get a cron job."""
        caches = build_caches(test_settings, upstream)
        sched = create_scheduler(test_settings, caches)

        jobs = {job.id: job for job in sched.get_jobs()}
        assert set(jobs) == {"refresh-users", "refresh-posts"}
        assert isinstance(jobs["refresh-users"].trigger, CronTrigger)
        assert jobs["refresh-users"].args == (caches.users,)
        assert jobs["refresh-posts"].args == (caches.posts,)

    async def test_job_refreshes_slot(self, test_settings, upstream: FakeUpstream) -> None:
        """Test that running the job rebuilds the slot."""
        caches = build_caches(test_settings, upstream)
        await run_refresh_job(caches.posts)
        assert caches.posts.ranked_set.size() == 5

    async def test_job_failure_is_contained(self, test_settings) -> None:
        """Test that a failed scheduled refresh does not raise."""
        source = FakeUpstream(users=UpstreamUnavailableError("down"))
        caches = build_caches(test_settings, source)
        await run_refresh_job(caches.users)
        assert caches.users.ranked_set.size() == 0
