"""Concurrency-bounded execution of translation tasks with retries."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Sequence

from .errors import (
    ErrorRecord,
    IncompleteBatchError,
    categorise,
)
from .providers import PromptContext, TranslationProvider
from .structures import TaskOutcome, TranslationTask

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Retry budget applied to each task independently."""

    max_retries: int = 3
    retry_delay: float = 1.0


@dataclass
class ExecutionReport:
    """All settled task outcomes in queue order."""

    outcomes: List[TaskOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    def successes(self) -> List[TaskOutcome]:
        return [outcome for outcome in self.outcomes if outcome.success]

    def failures(self) -> List[TaskOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]


class TaskExecutor:
    """Runs tasks in fixed windows of ``concurrency`` with a barrier between them."""

    def __init__(
        self,
        provider: TranslationProvider,
        *,
        concurrency: int = 1,
        retry_policy: RetryPolicy | None = None,
        strict_batches: bool = False,
        task_timeout: float | None = None,
        instruction: str | None = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be a positive integer.")
        self.provider = provider
        self.concurrency = concurrency
        self.retry_policy = retry_policy or RetryPolicy()
        self.strict_batches = strict_batches
        self.task_timeout = task_timeout
        self.instruction = instruction
        self._sleep = sleep

    def prompt_for(self, task: TranslationTask) -> PromptContext:
        if self.instruction:
            return PromptContext(
                language=task.language,
                locale=task.locale,
                instruction=self.instruction,
            )
        return PromptContext(language=task.language, locale=task.locale)

    async def _attempt(self, task: TranslationTask) -> Dict[str, str]:
        call = self.provider.translate_batch(task.schema, self.prompt_for(task))
        if self.task_timeout is not None:
            mapping = await asyncio.wait_for(call, timeout=self.task_timeout)
        else:
            mapping = await call

        missing = task.schema.missing(mapping)
        if missing:
            if self.strict_batches:
                raise IncompleteBatchError(missing)
            logger.warning(
                "%s: response omitted %d of %d keys; they stay pending.",
                task.label,
                len(missing),
                len(task.keys),
            )
        return dict(mapping)

    async def execute(self, task: TranslationTask) -> TaskOutcome:
        """Run one task until it succeeds or its retries are exhausted."""

        policy = self.retry_policy
        attempts = 0
        logger.info(
            "Starting %s (%d messages to %s)", task.label, len(task.keys), task.language
        )
        while True:
            attempts += 1
            started = time.monotonic()
            try:
                mapping = await self._attempt(task)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                if attempts <= policy.max_retries:
                    logger.warning(
                        "%s failed (retry %d/%d): %s",
                        task.label,
                        attempts,
                        policy.max_retries,
                        exc,
                    )
                    await self._sleep(policy.retry_delay)
                    continue

                logger.error(
                    "%s failed permanently after %d attempts: %s",
                    task.label,
                    attempts,
                    exc,
                )
                return TaskOutcome(
                    task=task,
                    success=False,
                    attempts=attempts,
                    error=ErrorRecord(
                        category=categorise(exc),
                        message=f"{task.label} failed after {attempts} attempts.",
                        details=str(exc) or exc.__class__.__name__,
                    ),
                )

            logger.info(
                "%s translated %d keys in %.0fms",
                task.label,
                len(mapping),
                (time.monotonic() - started) * 1000,
            )
            return TaskOutcome(
                task=task,
                success=True,
                translations=mapping,
                attempts=attempts,
            )

    async def run(self, tasks: Sequence[TranslationTask]) -> ExecutionReport:
        """Execute ``tasks`` window by window and collect every outcome."""

        report = ExecutionReport()
        window_count = math.ceil(len(tasks) / self.concurrency) if tasks else 0
        logger.info(
            "Executing %d translation tasks in %d windows of up to %d",
            len(tasks),
            window_count,
            self.concurrency,
        )

        for window_index, start in enumerate(range(0, len(tasks), self.concurrency), 1):
            window = tasks[start : start + self.concurrency]
            logger.info(
                "Processing window %d/%d with %d tasks",
                window_index,
                window_count,
                len(window),
            )
            settled = await asyncio.gather(
                *(self.execute(task) for task in window),
                return_exceptions=True,
            )
            for task, result in zip(window, settled):
                report.outcomes.append(self._settle(task, result))
            logger.info("Completed window %d/%d", window_index, window_count)

        logger.info(
            "Translation summary: %d successful, %d failed",
            report.succeeded,
            report.failed,
        )
        return report

    def _settle(
        self,
        task: TranslationTask,
        result: TaskOutcome | BaseException,
    ) -> TaskOutcome:
        if isinstance(result, TaskOutcome):
            return result
        if isinstance(result, asyncio.CancelledError):
            raise result
        logger.error("%s crashed: %s", task.label, result)
        return TaskOutcome(
            task=task,
            success=False,
            error=ErrorRecord(
                category=categorise(result),
                message=f"{task.label} crashed unexpectedly.",
                details=str(result) or result.__class__.__name__,
            ),
        )
