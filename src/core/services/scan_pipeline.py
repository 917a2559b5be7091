"""Reverse-IP scan orchestration.

The orchestrator owns the worker pool: N asyncio workers share one queue of
target IPs, one `httpx.AsyncClient` and one `ResultSink`. Each worker claims
an IP, asks every registered source about it in registration order and
forwards the hostnames to the sink. A failing source only loses its own
(IP, source) pair.

Side-effects meant for humans (printing, progress) stay out of this module;
the CLI plugs them in through `ScanHooks`.
"""

from __future__ import annotations

import asyncio
import signal
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import httpx
from loguru import logger

from adapters.http_client import build_async_client, jitter
from adapters.result_sink import ResultSink
from core.config import AppSettings
from core.domain.models import ScanResult, ScanStatus
from core.interfaces.source import ReverseIPSource

ClientFactory = Callable[[], httpx.AsyncClient]


@dataclass
class ScanHooks:
    """Optional callbacks for UI layers.

    All hooks run on the event loop thread, so they never interleave.
    """

    domain_found: Callable[[str, str, str], None] | None = None
    source_failed: Callable[[str, str, BaseException], None] | None = None
    target_done: Callable[[str, int], None] | None = None


@dataclass
class _Progress:
    processed: int = 0
    failures: int = 0


class ScanOrchestrator:
    """Bounded-parallel fan-out of target IPs across reverse-IP sources."""

    def __init__(
        self,
        targets: Sequence[str],
        sources: Sequence[ReverseIPSource],
        *,
        output_path: Path,
        threads: int,
        cancel_event: asyncio.Event | None = None,
        settings: AppSettings | None = None,
        hooks: ScanHooks | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        if not targets:
            raise ValueError("at least one target IP is required")
        if not sources:
            raise ValueError("at least one source is required")

        self._targets = tuple(targets)
        self._sources = tuple(sources)
        self._output_path = Path(output_path)
        self._threads = max(1, threads)
        self._cancel_event = cancel_event or asyncio.Event()
        self._settings = settings or AppSettings()
        self._hooks = hooks or ScanHooks()
        self._client_factory = client_factory or self._default_client

    @property
    def threads(self) -> int:
        return self._threads

    def _default_client(self) -> httpx.AsyncClient:
        return build_async_client(self._settings, max_connections=self._threads * 2)

    async def run(self) -> ScanResult:
        """Scan every target and return once the pool drained and the sink closed.

        Raises `SinkOpenError` before any worker starts when the output file
        cannot be created.
        """

        result = ScanResult(
            status=ScanStatus.SUCCESS,
            output_path=self._output_path,
            targets_total=len(self._targets),
        )
        sink = ResultSink(self._output_path)
        progress = _Progress()

        queue: asyncio.Queue[str] = asyncio.Queue()
        for target in self._targets:
            queue.put_nowait(target)

        worker_count = min(self._threads, len(self._targets))
        logger.info(
            "Scanning {} IPs with {} workers across {} sources",
            len(self._targets),
            worker_count,
            len(self._sources),
        )

        try:
            async with self._client_factory() as client:
                workers = [
                    asyncio.create_task(
                        self._worker(queue, client, sink, progress),
                        name=f"ipfinder-worker-{index}",
                    )
                    for index in range(worker_count)
                ]
                await self._drain(workers)
        finally:
            sink.close()

        result.targets_processed = progress.processed
        result.source_failures = progress.failures
        result.domains_found = sink.final_count()
        result.finished_at = datetime.now(timezone.utc)
        if self._cancel_event.is_set() and progress.processed < len(self._targets):
            result.status = ScanStatus.CANCELLED
            logger.info("Scan cancelled after {}/{} IPs", progress.processed, len(self._targets))
        return result

    async def _drain(self, workers: list[asyncio.Task[None]]) -> None:
        """Wait for every worker, or for cancellation, whichever comes first."""

        stop = asyncio.create_task(self._cancel_event.wait())
        pending: set[asyncio.Task[None]] = set(workers)
        try:
            while pending:
                done, _ = await asyncio.wait(pending | {stop}, return_when=asyncio.FIRST_COMPLETED)
                for task in done & pending:
                    pending.discard(task)
                    # Source errors never get here; anything else is a bug and fatal.
                    task.result()
                if stop in done:
                    break
        finally:
            stop.cancel()
            # In-flight requests are aborted together with their worker task.
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

    async def _worker(
        self,
        queue: asyncio.Queue[str],
        client: httpx.AsyncClient,
        sink: ResultSink,
        progress: _Progress,
    ) -> None:
        while not self._cancel_event.is_set():
            try:
                ip = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            found = await self._scan_target(ip, client, sink, progress)
            if found is None:
                return
            progress.processed += 1
            if self._hooks.target_done:
                self._hooks.target_done(ip, found)

    async def _scan_target(
        self,
        ip: str,
        client: httpx.AsyncClient,
        sink: ResultSink,
        progress: _Progress,
    ) -> int | None:
        """Query every source for `ip`; None when cancellation interrupted it."""

        found = 0
        for source in self._sources:
            if self._cancel_event.is_set():
                return None

            await jitter(self._settings.request_jitter_min_ms, self._settings.request_jitter_max_ms)
            try:
                domains = await source.query(ip, client)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                progress.failures += 1
                logger.debug("{} failed for {}: {!r}", source.name, ip, exc)
                if self._hooks.source_failed:
                    self._hooks.source_failed(ip, source.name, exc)
                continue

            for domain in sorted(domains):
                if sink.accept(domain):
                    found += 1
                    if self._hooks.domain_found:
                        self._hooks.domain_found(domain, ip, source.name)
        return found


async def scan(
    targets: Sequence[str],
    sources: Sequence[ReverseIPSource],
    *,
    output_path: Path,
    threads: int,
    settings: AppSettings,
    hooks: ScanHooks | None = None,
) -> ScanResult:
    """Run one scan with SIGINT/SIGTERM mapped to the cancellation event."""

    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, cancel_event.set)
        except (NotImplementedError, RuntimeError):
            # Windows / non-main thread: KeyboardInterrupt still reaches the caller.
            continue
        installed.append(sig)

    orchestrator = ScanOrchestrator(
        targets,
        sources,
        output_path=output_path,
        threads=threads,
        cancel_event=cancel_event,
        settings=settings,
        hooks=hooks,
    )
    try:
        return await orchestrator.run()
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def run_scan(
    targets: Sequence[str],
    sources: Sequence[ReverseIPSource],
    *,
    output_path: Path,
    threads: int,
    settings: AppSettings,
    hooks: ScanHooks | None = None,
) -> ScanResult:
    return asyncio.run(
        scan(
            targets,
            sources,
            output_path=output_path,
            threads=threads,
            settings=settings,
            hooks=hooks,
        )
    )
