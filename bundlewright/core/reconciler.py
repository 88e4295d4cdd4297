"""Reconciliation engine — which staged artifacts are missing remotely.

Every staged file is checked against the remote store by its canonical
file name. A probe answers found, not found, or indeterminate. An
indeterminate answer is retried after a delay; if every attempt is
indeterminate the file is reported as an error and lands in neither
bucket. "Could not reach the server" never counts as "not uploaded".

Probes run concurrently, bounded by ``RetryPolicy.max_concurrency``. A
file holds a concurrency slot only while its probe is in flight; retry
delays are ``await``-ed sleeps that leave the slot to other files.

Three ways to run a pass:

- ``await reconciler.reconcile_async(staged)`` inside an event loop.
- ``reconciler.reconcile(staged)`` blocks until every probe, retries
  included, has resolved. For batch environments with no loop of their own.
- ``reconciler.start(staged)`` runs the pass on a background thread and
  returns a ``ReconciliationHandle`` to poll, wait on, or cancel.

A cancelled pass returns what it resolved so far; unresolved files are
listed in ``ReconciliationResult.pending``.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable, Iterable
from concurrent.futures import Future
from typing import Protocol, runtime_checkable

from bundlewright.errors import BundleError, ProbeIndeterminateError
from bundlewright.models.reconcile import ProbeResult, ReconciliationResult, RetryPolicy
from bundlewright.models.staging import StagedArtifactFile

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]
_Outcome = ProbeResult | BundleError | None


@runtime_checkable
class ExistenceProbe(Protocol):
    """HEAD-style existence check against the remote store.

    Must be safe to call concurrently. Raising is treated as an
    indeterminate answer for that attempt.
    """

    async def probe(self, file_name: str) -> ProbeResult:
        ...


class Reconciler:
    """Determines the subset of staged artifacts that still needs uploading.

    Parameters
    ----------
    probe:
        The remote existence probe.
    policy:
        Retry count, retry delay and concurrency limit.
    sleep:
        Awaitable used for the delay between attempts.
    """

    def __init__(
        self,
        probe: ExistenceProbe,
        policy: RetryPolicy | None = None,
        *,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._probe = probe
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Single file
    # ------------------------------------------------------------------

    async def _resolve(
        self,
        staged: StagedArtifactFile,
        semaphore: asyncio.Semaphore,
    ) -> ProbeResult | BundleError:
        try:
            key = staged.file_name()
        except BundleError as exc:
            logger.warning("Cannot reconcile %s: %s", staged.name, exc)
            return exc
        attempts = self.policy.max_attempts
        last_error: str | None = None

        for attempt in range(1, attempts + 1):
            async with semaphore:
                try:
                    result = ProbeResult(await self._probe.probe(key))
                except Exception as exc:
                    last_error = f"{type(exc).__name__}: {exc}"
                    logger.debug("Probe for %s raised %s", key, last_error)
                    result = ProbeResult.INDETERMINATE

            if result is not ProbeResult.INDETERMINATE:
                return result
            if attempt < attempts:
                logger.debug(
                    "Probe for %s indeterminate (attempt %d/%d), retrying in %.2fs",
                    key,
                    attempt,
                    attempts,
                    self.policy.retry_delay_seconds,
                )
                await self._sleep(self.policy.retry_delay_seconds)

        logger.warning("Giving up on %s after %d indeterminate attempt(s)", key, attempts)
        return ProbeIndeterminateError(staged, attempts, last_error)

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    async def reconcile_async(
        self, staged: Iterable[StagedArtifactFile]
    ) -> ReconciliationResult:
        """Probe every staged file and partition the results."""
        files = list(staged)
        semaphore = asyncio.Semaphore(self.policy.max_concurrency)
        # One slot per input index; each task writes only its own.
        slots: list[_Outcome] = [None] * len(files)

        async def run(index: int, item: StagedArtifactFile) -> None:
            slots[index] = await self._resolve(item, semaphore)

        tasks = [asyncio.ensure_future(run(i, item)) for i, item in enumerate(files)]
        cancelled = False
        try:
            if tasks:
                await asyncio.gather(*tasks)
        except asyncio.CancelledError:
            cancelled = True
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            current = asyncio.current_task()
            if current is not None:
                current.uncancel()
            logger.warning("Reconciliation cancelled; returning partial results")

        result = _collect(files, slots, cancelled)
        logger.info(
            "Reconciled %d staged artifact(s): %d to upload, %d already published, "
            "%d unresolved, %d pending",
            len(files),
            len(result.needs_upload),
            len(result.found),
            len(result.errors),
            len(result.pending),
        )
        return result

    def reconcile(self, staged: Iterable[StagedArtifactFile]) -> ReconciliationResult:
        """Run a pass to completion on the calling thread.

        Drives its own event loop, so it cannot be called from inside a
        running loop; await ``reconcile_async`` there instead.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.reconcile_async(staged))
        raise RuntimeError(
            "Reconciler.reconcile() blocks the calling thread; "
            "use 'await Reconciler.reconcile_async()' inside an event loop"
        )

    def start(self, staged: Iterable[StagedArtifactFile]) -> ReconciliationHandle:
        """Run a pass on a background thread and return immediately."""
        return ReconciliationHandle(self, list(staged))


def _collect(
    files: list[StagedArtifactFile],
    slots: list[_Outcome],
    cancelled: bool,
) -> ReconciliationResult:
    needs_upload: list[StagedArtifactFile] = []
    found: list[StagedArtifactFile] = []
    errors: list[BundleError] = []
    pending: list[StagedArtifactFile] = []

    for item, outcome in zip(files, slots):
        if outcome is None:
            pending.append(item)
        elif isinstance(outcome, BundleError):
            errors.append(outcome)
        elif outcome is ProbeResult.FOUND:
            found.append(item)
        else:
            needs_upload.append(item)

    return ReconciliationResult(
        needs_upload=needs_upload,
        found=found,
        errors=errors,
        pending=pending,
        cancelled=cancelled,
    )


class ReconciliationHandle:
    """A reconciliation pass running on its own thread and event loop."""

    def __init__(self, reconciler: Reconciler, staged: list[StagedArtifactFile]) -> None:
        self._reconciler = reconciler
        self._staged = staged
        self._future: Future[ReconciliationResult] = Future()
        self._loop = asyncio.new_event_loop()
        self._task: asyncio.Task[ReconciliationResult] | None = None
        self._ready = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name="bundlewright-reconcile", daemon=True
        )
        self._thread.start()

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        try:
            self._task = self._loop.create_task(
                self._reconciler.reconcile_async(self._staged)
            )
            self._ready.set()
            result = self._loop.run_until_complete(self._task)
        except asyncio.CancelledError:
            # Cancelled before the pass got to run at all.
            self._future.set_result(
                _collect(self._staged, [None] * len(self._staged), cancelled=True)
            )
        except BaseException as exc:
            self._future.set_exception(exc)
        else:
            self._future.set_result(result)
        finally:
            self._ready.set()
            self._loop.close()

    def done(self) -> bool:
        """True once the pass has finished, normally or by cancellation."""
        return self._future.done()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the pass finishes; return whether it did in time."""
        try:
            self._future.exception(timeout=timeout)
        except TimeoutError:
            return False
        return True

    def result(self, timeout: float | None = None) -> ReconciliationResult:
        """Block until the pass finishes and return its result."""
        return self._future.result(timeout=timeout)

    def cancel(self) -> None:
        """Abandon in-flight probes; ``result()`` then returns partial results."""
        self._ready.wait()
        if self._future.done() or self._task is None:
            return
        try:
            self._loop.call_soon_threadsafe(self._task.cancel)
        except RuntimeError:
            # Loop already closed: the pass finished in the meantime.
            pass
