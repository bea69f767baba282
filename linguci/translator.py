"""High-level orchestration for catalog synchronization and translation."""

from __future__ import annotations

import asyncio
import logging
import pathlib
import time
from dataclasses import dataclass, field
from typing import List

from .catalogs import read_catalog, write_catalog
from .configuration import ProjectConfig, validate_paths
from .locales import detect_source_locale, locale_from_path
from .planner import build_tasks, plan_batches
from .providers import TranslationProvider
from .scheduler import ExecutionReport, RetryPolicy, Sleeper, TaskExecutor
from .structures import RunState, TranslationTask
from .synchronizer import extract_backlog, merge_result, synchronize

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Report returned after a synchronization run."""

    catalogs: int
    total_tasks: int
    succeeded_tasks: int
    failed_tasks: int
    pending_before: int
    pending_after: int
    translated_keys: int
    provider_name: str
    model: str | None
    elapsed_seconds: float
    written_paths: List[str] = field(default_factory=list)
    error_messages: List[str] = field(default_factory=list)


def count_pending(run_state: RunState) -> int:
    return sum(
        len(keys)
        for catalog in run_state.catalogs.values()
        for keys in extract_backlog(catalog).values()
    )


class CatalogSyncRunner:
    """Coordinates reading, synchronization, batching, translation, and writing."""

    def __init__(
        self,
        *,
        project: ProjectConfig,
        provider: TranslationProvider,
        model: str | None = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.project = project
        self.provider = provider
        self.model = model
        self.executor = TaskExecutor(
            provider,
            concurrency=project.language_concurrency,
            retry_policy=RetryPolicy(
                max_retries=project.max_retries,
                retry_delay=project.retry_delay,
            ),
            strict_batches=project.strict_batches,
            task_timeout=project.task_timeout,
            instruction=project.instruction,
            sleep=sleep,
        )

    def prepare(self) -> RunState:
        """Load and synchronize every catalog pair and plan its batches.

        Missing or unreadable catalogs raise here, before any provider call.
        """

        project = self.project
        validate_paths(project)
        run_state = RunState()

        for mapping in project.files:
            source_path = project.source_path(mapping)
            source = read_catalog(
                source_path,
                locale=detect_source_locale(mapping.source, project.locales),
            )
            logger.info("Processing source file: %s", source_path)

            for locale in project.target_locales(mapping):
                target_path = project.translation_path(mapping, locale)
                pair = (str(source_path), str(target_path))
                if pair in run_state.catalogs:
                    continue

                target_locale = (
                    locale
                    if mapping.is_templated
                    else locale_from_path(mapping.translation, project.locales) or locale
                )
                target = read_catalog(target_path, locale=target_locale)
                synchronize(source, target)
                run_state.catalogs[pair] = target

                backlog = extract_backlog(target)
                for context, batches in plan_batches(backlog, project.batch_size).items():
                    run_state.batches[(pair[0], pair[1], context)] = batches
                    logger.info(
                        "%s: context '%s' has %d batches to translate",
                        target_path,
                        context,
                        len(batches),
                    )
        return run_state

    def plan(self, run_state: RunState) -> List[TranslationTask]:
        return build_tasks(run_state, self.project.locales)

    async def execute(self, run_state: RunState) -> ExecutionReport:
        """Run every planned task and merge the successful results."""

        tasks = self.plan(run_state)
        logger.info("Created %d translation tasks in total", len(tasks))
        report = await self.executor.run(tasks)

        for outcome in report.successes():
            task = outcome.task
            # Only the batch's own keys; other keys belong to sibling tasks.
            requested = {
                key: outcome.translations[key]
                for key in task.keys
                if key in outcome.translations
            }
            updated = merge_result(run_state.catalog_for(task), task.context, requested)
            logger.debug("%s merged %d translations", task.label, len(updated))
        return report

    def write(self, run_state: RunState) -> List[str]:
        written: List[str] = []
        for (_, target_path), catalog in run_state.catalogs.items():
            write_catalog(catalog, pathlib.Path(target_path), backup=self.project.backup)
            written.append(target_path)
        logger.info("Translation files written: %d", len(written))
        return written

    async def run(self, *, write: bool = True) -> RunSummary:
        start_time = time.time()

        run_state = self.prepare()
        pending_before = count_pending(run_state)
        report = await self.execute(run_state)
        pending_after = count_pending(run_state)
        written = self.write(run_state) if write else []

        return RunSummary(
            catalogs=len(run_state.catalogs),
            total_tasks=report.total,
            succeeded_tasks=report.succeeded,
            failed_tasks=report.failed,
            pending_before=pending_before,
            pending_after=pending_after,
            translated_keys=pending_before - pending_after,
            provider_name=self.provider.name,
            model=self.model,
            elapsed_seconds=time.time() - start_time,
            written_paths=written,
            error_messages=[
                f"{outcome.error.message} ({outcome.error.details})"
                for outcome in report.failures()
                if outcome.error is not None
            ],
        )
