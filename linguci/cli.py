"""Command line interface for the Linguci catalog translator."""

from __future__ import annotations

import argparse
import asyncio
import logging
import pathlib
import sys
from typing import Iterable, Optional

from .configuration import ProjectConfig, get_settings, load_project
from .errors import ConfigurationError, LinguciError
from .providers import ProviderKind, build_provider
from .translator import CatalogSyncRunner, RunSummary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linguci",
        description=(
            "Synchronize gettext catalogs with their source and fill in missing "
            "translations with a language model."
        ),
    )
    parser.add_argument(
        "workspace",
        nargs="?",
        default=".",
        help="Directory containing linguci.yml (default: current directory).",
    )
    parser.add_argument(
        "-b",
        "--batch-size",
        type=int,
        help="Number of messages per translation request (default: 5).",
    )
    parser.add_argument(
        "-c",
        "--concurrency",
        type=int,
        help="Maximum number of translation requests in flight (default: 1).",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        help="Retries per batch before it is reported as failed (default: 3).",
    )
    parser.add_argument(
        "--retry-delay",
        type=float,
        help="Seconds to wait between retries (default: 1.0).",
    )
    parser.add_argument(
        "-p",
        "--provider",
        help="Translation provider: openai, azure_openai or echo.",
    )
    parser.add_argument(
        "-m",
        "--model",
        help="Provider-specific model or deployment identifier.",
    )
    parser.add_argument(
        "--strict-batches",
        action="store_true",
        default=None,
        help="Retry a batch when the response omits any requested message.",
    )
    parser.add_argument(
        "--no-backup",
        action="store_true",
        help="Do not keep a .bak copy of each catalog before rewriting it.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Synchronize and plan batches without calling the provider or writing files.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show detailed progress information.",
    )
    parser.add_argument(
        "--debug-provider",
        action="store_true",
        help="Log complete provider requests and responses for troubleshooting.",
    )
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )


def _overrides(args: argparse.Namespace) -> dict:
    return {
        "batch_size": args.batch_size,
        "language_concurrency": args.concurrency,
        "max_retries": args.max_retries,
        "retry_delay": args.retry_delay,
        "strict_batches": args.strict_batches,
        "backup": False if args.no_backup else None,
    }


def execute_run(
    *,
    workspace: pathlib.Path,
    project: ProjectConfig,
    provider_name: str | None,
    model: str | None,
    dry_run: bool,
    provider_debug: bool,
) -> tuple[int, RunSummary | None, str | None]:
    """Execute a run and return the exit code, summary, and message."""

    try:
        settings = get_settings(workspace)
        kind = ProviderKind.parse(
            provider_name or settings.LLM_PROVIDER or project.llm.provider.value
        )
        if dry_run:
            kind = ProviderKind.ECHO
        model = model or project.llm.model
        provider = build_provider(
            kind,
            settings=settings,
            model=model,
            debug=provider_debug or settings.LINGUCI_PROVIDER_DEBUG,
        )
        runner = CatalogSyncRunner(project=project, provider=provider, model=model)

        if dry_run:
            run_state = runner.prepare()
            tasks = runner.plan(run_state)
            for task in tasks:
                print(f"  {task.label}: {len(task.keys)} messages -> {task.language}")
            return 0, None, f"Dry run: {len(tasks)} translation tasks planned."

        summary = asyncio.run(runner.run(write=True))
    except LinguciError as exc:
        return 1, None, str(exc)
    except OSError as exc:
        return 1, None, f"Could not write translation files: {exc}"
    except KeyboardInterrupt:
        return 2, None, "Translation interrupted by user."

    return 0, summary, None


def print_summary(summary: RunSummary) -> None:
    """Output a friendly report once processing completes."""

    print("\nTranslation complete.")
    print(f"  Catalogs:        {summary.catalogs}")
    print(
        "  Tasks:           "
        f"{summary.succeeded_tasks} successful / {summary.total_tasks} total "
        f"({summary.failed_tasks} failed)"
    )
    print(
        f"  Messages:        {summary.translated_keys} translated, "
        f"{summary.pending_after} still pending"
    )
    print(
        f"  Provider:        {summary.provider_name}"
        + (f" ({summary.model})" if summary.model else "")
    )
    print(f"  Files written:   {len(summary.written_paths)}")
    print(f"  Elapsed time:    {summary.elapsed_seconds:.2f} seconds")
    if summary.error_messages:
        print("  Notes:")
        for message in summary.error_messages:
            print(f"    - {message}")


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(args.verbose or args.debug_provider)

    workspace = pathlib.Path(args.workspace).expanduser().resolve()
    try:
        project = load_project(workspace, overrides=_overrides(args))
    except ConfigurationError as exc:
        print(exc)
        return 1

    exit_code, summary, message = execute_run(
        workspace=workspace,
        project=project,
        provider_name=args.provider,
        model=args.model,
        dry_run=args.dry_run,
        provider_debug=args.debug_provider,
    )

    if message:
        print(message)
    if summary:
        print_summary(summary)
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
