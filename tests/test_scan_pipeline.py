"""
Tests for the reverse-IP scan orchestrator.
"""
import asyncio
import os
import signal
import sys
from pathlib import Path

import httpx
import pytest

from conftest import StubSource, read_lines
from core.domain.models import ScanStatus
from core.errors import SinkOpenError, SourceError
import core.services.scan_pipeline
from adapters.result_sink import ResultSink
from core.services.scan_pipeline import ScanHooks, ScanOrchestrator, scan


def make_orchestrator(targets, sources, tmp_path, settings, factory, **kwargs):
    kwargs.setdefault("threads", 4)
    return ScanOrchestrator(
        targets,
        sources,
        output_path=tmp_path / "results" / "domains.txt",
        settings=settings,
        client_factory=factory,
        **kwargs,
    )


class TestScanResults:
    """Tests for what ends up in the output file."""

    @pytest.mark.asyncio
    async def test_two_sources_single_ip(self, tmp_path, settings, offline_client_factory):
        """Overlapping results from two sources are written once each."""
        sources = [
            StubSource("first", {"dns.google", "a.b.c"}),
            StubSource("second", {"dns.google"}),
        ]
        orchestrator = make_orchestrator(["8.8.8.8"], sources, tmp_path, settings, offline_client_factory)

        result = await orchestrator.run()

        lines = read_lines(result.output_path)
        assert sorted(lines) == ["a.b.c", "dns.google"]
        assert result.domains_found == 2
        assert result.status is ScanStatus.SUCCESS
        assert result.targets_processed == 1
        assert result.finished_at is not None

    @pytest.mark.asyncio
    async def test_all_sources_failing_still_succeeds(self, tmp_path, settings, offline_client_factory):
        """A target where every source fails completes with zero domains."""
        sources = [
            StubSource("broken", error=httpx.ConnectError("refused")),
            StubSource("bad-status", error=SourceError("bad-status", "status 503")),
            StubSource("garbage", error=ValueError("cannot parse")),
        ]
        orchestrator = make_orchestrator(["10.0.0.1"], sources, tmp_path, settings, offline_client_factory)

        result = await orchestrator.run()

        assert result.status is ScanStatus.SUCCESS
        assert result.domains_found == 0
        assert result.source_failures == 3
        assert result.targets_processed == 1
        assert read_lines(result.output_path) == []

    @pytest.mark.asyncio
    async def test_duplicates_across_targets_written_once(self, tmp_path, settings, offline_client_factory):
        sources = [StubSource("shared", {"cdn.example.com", "site.example.org"})]
        orchestrator = make_orchestrator(
            ["1.1.1.1", "1.0.0.1", "1.1.1.1"], sources, tmp_path, settings, offline_client_factory
        )

        result = await orchestrator.run()

        lines = read_lines(result.output_path)
        assert len(lines) == len(set(lines)) == 2
        assert result.domains_found == 2
        assert result.targets_processed == 3

    @pytest.mark.asyncio
    async def test_output_file_is_overwritten(self, tmp_path, settings, offline_client_factory):
        output = tmp_path / "results" / "domains.txt"
        output.parent.mkdir(parents=True)
        output.write_text("stale.example.com\n", encoding="utf-8")
        orchestrator = make_orchestrator(
            ["8.8.8.8"], [StubSource("one", {"fresh.example.com"})], tmp_path, settings, offline_client_factory
        )

        await orchestrator.run()

        assert read_lines(output) == ["fresh.example.com"]


class TestScheduling:
    """Tests for the worker pool."""

    @pytest.mark.asyncio
    async def test_every_target_processed_exactly_once(self, tmp_path, settings, offline_client_factory):
        """With M > N targets, each IP is claimed by exactly one worker."""
        targets = [f"192.0.2.{i}" for i in range(1, 26)]
        calls: list[tuple[str, str]] = []
        source = StubSource("recorder", delay=0.005, calls=calls)
        orchestrator = make_orchestrator(targets, [source], tmp_path, settings, offline_client_factory, threads=4)

        result = await orchestrator.run()

        scanned = [ip for ip, _ in calls]
        assert sorted(scanned) == sorted(targets)
        assert len(scanned) == len(set(scanned))
        assert result.targets_processed == len(targets)

    @pytest.mark.asyncio
    async def test_pool_never_exceeds_thread_limit(self, tmp_path, settings, offline_client_factory):
        active = 0
        peak = 0

        class CountingSource:
            name = "counting"

            async def query(self, ip, client):
                nonlocal active, peak
                active += 1
                peak = max(peak, active)
                await asyncio.sleep(0.01)
                active -= 1
                return {f"host-{ip.replace('.', '-')}.example.com"}

        targets = [f"198.51.100.{i}" for i in range(1, 31)]
        orchestrator = make_orchestrator(
            targets, [CountingSource()], tmp_path, settings, offline_client_factory, threads=3
        )

        result = await orchestrator.run()

        assert peak <= 3
        assert result.domains_found == 30

    @pytest.mark.asyncio
    async def test_sources_queried_in_registration_order(self, tmp_path, settings, offline_client_factory):
        """A failing source does not skip the ones registered after it."""
        calls: list[tuple[str, str]] = []
        sources = [
            StubSource("alpha", {"a.example.com"}, calls=calls),
            StubSource("beta", error=RuntimeError("boom"), calls=calls),
            StubSource("gamma", {"g.example.com"}, calls=calls),
        ]
        orchestrator = make_orchestrator(
            ["203.0.113.1", "203.0.113.2"], sources, tmp_path, settings, offline_client_factory, threads=2
        )

        result = await orchestrator.run()

        for ip in ("203.0.113.1", "203.0.113.2"):
            assert [name for called_ip, name in calls if called_ip == ip] == ["alpha", "beta", "gamma"]
        assert result.source_failures == 2
        assert sorted(read_lines(result.output_path)) == ["a.example.com", "g.example.com"]

    def test_non_positive_threads_clamped(self, tmp_path, settings, offline_client_factory):
        orchestrator = make_orchestrator(
            ["8.8.8.8"], [StubSource("one")], tmp_path, settings, offline_client_factory, threads=0
        )
        assert orchestrator.threads == 1

        orchestrator = make_orchestrator(
            ["8.8.8.8"], [StubSource("one")], tmp_path, settings, offline_client_factory, threads=-5
        )
        assert orchestrator.threads == 1

    def test_empty_inputs_rejected(self, tmp_path, settings, offline_client_factory):
        with pytest.raises(ValueError):
            make_orchestrator([], [StubSource("one")], tmp_path, settings, offline_client_factory)
        with pytest.raises(ValueError):
            make_orchestrator(["8.8.8.8"], [], tmp_path, settings, offline_client_factory)


class TestFailureModes:
    """Tests for fatal errors and cancellation."""

    @pytest.mark.asyncio
    async def test_unwritable_output_is_fatal_before_workers(self, tmp_path, settings, offline_client_factory):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")
        calls: list[tuple[str, str]] = []
        orchestrator = ScanOrchestrator(
            ["8.8.8.8"],
            [StubSource("one", {"a.example.com"}, calls=calls)],
            output_path=blocker / "domains.txt",
            threads=2,
            settings=settings,
            client_factory=offline_client_factory,
        )

        with pytest.raises(SinkOpenError):
            await orchestrator.run()
        assert calls == []

    @pytest.mark.asyncio
    async def test_cancel_before_start(self, tmp_path, settings, offline_client_factory):
        cancel_event = asyncio.Event()
        cancel_event.set()
        calls: list[tuple[str, str]] = []
        orchestrator = make_orchestrator(
            ["8.8.8.8", "8.8.4.4"],
            [StubSource("one", {"a.example.com"}, calls=calls)],
            tmp_path,
            settings,
            offline_client_factory,
            cancel_event=cancel_event,
        )

        result = await orchestrator.run()

        assert result.status is ScanStatus.CANCELLED
        assert result.targets_processed == 0
        assert calls == []

    @pytest.mark.asyncio
    async def test_cancel_mid_scan_aborts_in_flight_calls(self, tmp_path, settings, offline_client_factory):
        """In-flight source calls are interrupted and run() returns promptly."""
        cancel_event = asyncio.Event()
        aborted: list[str] = []

        class HangingSource:
            name = "hanging"

            async def query(self, ip, client):
                try:
                    await asyncio.sleep(3600)
                except asyncio.CancelledError:
                    aborted.append(ip)
                    raise
                return set()

        sources = [StubSource("fast", {"early.example.com"}), HangingSource()]
        targets = [f"192.0.2.{i}" for i in range(1, 11)]
        orchestrator = make_orchestrator(
            targets, sources, tmp_path, settings, offline_client_factory, threads=2, cancel_event=cancel_event
        )

        task = asyncio.create_task(orchestrator.run())
        await asyncio.sleep(0.05)
        cancel_event.set()
        result = await asyncio.wait_for(task, timeout=2)

        assert result.status is ScanStatus.CANCELLED
        assert result.targets_processed == 0
        assert len(aborted) == 2
        assert read_lines(result.output_path) == ["early.example.com"]
        assert result.domains_found == 1

    @pytest.mark.asyncio
    async def test_external_task_cancellation_propagates(self, tmp_path, settings, offline_client_factory):
        class HangingSource:
            name = "hanging"

            async def query(self, ip, client):
                await asyncio.sleep(3600)
                return set()

        orchestrator = make_orchestrator(
            ["8.8.8.8"], [HangingSource()], tmp_path, settings, offline_client_factory
        )

        task = asyncio.create_task(orchestrator.run())
        await asyncio.sleep(0.02)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert (tmp_path / "results" / "domains.txt").exists()

    @pytest.mark.asyncio
    async def test_completed_scan_with_event_set_late_is_success(self, tmp_path, settings, offline_client_factory):
        cancel_event = asyncio.Event()
        orchestrator = make_orchestrator(
            ["8.8.8.8"],
            [StubSource("one", {"a.example.com"})],
            tmp_path,
            settings,
            offline_client_factory,
            cancel_event=cancel_event,
        )

        result = await orchestrator.run()
        cancel_event.set()

        assert result.status is ScanStatus.SUCCESS


class TestHooks:
    """Tests for progress reporting callbacks."""

    @pytest.mark.asyncio
    async def test_hooks_receive_progress(self, tmp_path, settings, offline_client_factory):
        found: list[tuple[str, str, str]] = []
        failed: list[tuple[str, str, str]] = []
        done: list[tuple[str, int]] = []
        hooks = ScanHooks(
            domain_found=lambda domain, ip, source: found.append((domain, ip, source)),
            source_failed=lambda ip, source, exc: failed.append((ip, source, type(exc).__name__)),
            target_done=lambda ip, count: done.append((ip, count)),
        )
        sources = [
            StubSource("first", {"dns.google", "a.b.c"}),
            StubSource("second", {"dns.google"}),
            StubSource("third", error=httpx.ReadTimeout("slow")),
        ]
        orchestrator = make_orchestrator(
            ["8.8.8.8"], sources, tmp_path, settings, offline_client_factory, hooks=hooks
        )

        await orchestrator.run()

        assert sorted(found) == [("a.b.c", "8.8.8.8", "first"), ("dns.google", "8.8.8.8", "first")]
        assert failed == [("8.8.8.8", "third", "ReadTimeout")]
        assert done == [("8.8.8.8", 2)]


class HangingSource:
    name = "hanging"

    async def query(self, ip, client):
        await asyncio.sleep(3600)
        return set()


class TestFatalWorkerErrors:
    """Tests for errors raised outside a source call."""

    @pytest.mark.asyncio
    async def test_hook_error_propagates_and_sink_closes(
        self, tmp_path, settings, offline_client_factory, monkeypatch
    ):
        closed: list[ResultSink] = []

        class RecordingSink(ResultSink):
            def close(self):
                super().close()
                closed.append(self)

        monkeypatch.setattr(core.services.scan_pipeline, "ResultSink", RecordingSink)

        def broken_hook(domain, ip, source):
            raise ZeroDivisionError("hook bug")

        orchestrator = make_orchestrator(
            ["8.8.8.8", "8.8.4.4"],
            [StubSource("one", {"a.example.com"}), HangingSource()],
            tmp_path,
            settings,
            offline_client_factory,
            threads=2,
            hooks=ScanHooks(domain_found=broken_hook),
        )

        with pytest.raises(ZeroDivisionError):
            await asyncio.wait_for(orchestrator.run(), timeout=2)

        assert len(closed) == 1
        assert closed[0].closed
        assert read_lines(tmp_path / "results" / "domains.txt") == ["a.example.com"]

    @pytest.mark.asyncio
    @pytest.mark.skipif(not Path("/dev/full").exists(), reason="needs /dev/full")
    async def test_full_disk_does_not_abort_scan(self, settings, offline_client_factory):
        orchestrator = ScanOrchestrator(
            ["8.8.8.8"],
            [StubSource("one", {"dns.google", "a.b.c"})],
            output_path=Path("/dev/full"),
            threads=1,
            settings=settings,
            client_factory=offline_client_factory,
        )

        result = await orchestrator.run()

        assert result.status is ScanStatus.SUCCESS
        assert result.targets_processed == 1
        assert result.domains_found == 0


@pytest.mark.skipif(sys.platform == "win32", reason="loop signal handlers need a POSIX loop")
class TestSignals:
    """Tests for SIGINT/SIGTERM mapped to cancellation."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("signum", [signal.SIGINT, signal.SIGTERM])
    async def test_signal_cancels_scan(self, tmp_path, settings, signum):
        loop = asyncio.get_running_loop()
        loop.call_later(0.05, os.kill, os.getpid(), signum)

        result = await asyncio.wait_for(
            scan(
                ["192.0.2.1", "192.0.2.2"],
                [StubSource("fast", {"early.example.com"}), HangingSource()],
                output_path=tmp_path / "domains.txt",
                threads=2,
                settings=settings,
            ),
            timeout=3,
        )

        assert result.status is ScanStatus.CANCELLED
        assert result.cancelled
        assert read_lines(tmp_path / "domains.txt") == ["early.example.com"]
