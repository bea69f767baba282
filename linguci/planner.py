"""Backlog batching and provider response schemas."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from pydantic import TypeAdapter, ValidationError

from .errors import SchemaValidationError
from .locales import language_display_name, locale_from_path
from .structures import Batch, RunState, TranslationTask

_PAYLOAD_ADAPTER: TypeAdapter[Dict[str, str]] = TypeAdapter(Dict[str, str])


class BatchSchema:
    """Contract a provider response must satisfy: one string per key."""

    def __init__(self, keys: Iterable[str]) -> None:
        self.keys: Tuple[str, ...] = tuple(keys)

    def __repr__(self) -> str:
        return f"BatchSchema(keys={list(self.keys)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BatchSchema):
            return NotImplemented
        return self.keys == other.keys

    def __hash__(self) -> int:
        return hash(self.keys)

    def json_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {key: {"type": "string"} for key in self.keys},
            "required": list(self.keys),
            "additionalProperties": False,
        }

    def validate(self, payload: Any) -> Dict[str, str]:
        """Check ``payload`` is a mapping of string values and return it."""

        try:
            return _PAYLOAD_ADAPTER.validate_python(payload, strict=True)
        except ValidationError as exc:
            raise SchemaValidationError(
                f"Translation provider response does not match the batch schema: {exc}"
            ) from exc

    def missing(self, mapping: Mapping[str, str]) -> List[str]:
        return [key for key in self.keys if key not in mapping]


def chunk_keys(keys: Sequence[str], batch_size: int) -> List[List[str]]:
    """Split ``keys`` into consecutive chunks of at most ``batch_size``."""

    if batch_size < 1:
        raise ValueError("batch_size must be a positive integer.")
    return [list(keys[i : i + batch_size]) for i in range(0, len(keys), batch_size)]


def plan_batches(
    backlog: Mapping[str, Sequence[str]],
    batch_size: int,
) -> Dict[str, List[Batch]]:
    """Partition each context's backlog into numbered batches."""

    planned: Dict[str, List[Batch]] = {}
    for context, keys in backlog.items():
        planned[context] = [
            Batch(index=index, keys=chunk, schema=BatchSchema(chunk))
            for index, chunk in enumerate(chunk_keys(keys, batch_size))
        ]
    return planned


def build_tasks(run_state: RunState, locales: Sequence[str]) -> List[TranslationTask]:
    """Flatten every planned batch of the run into one task queue."""

    tasks: List[TranslationTask] = []
    for (source_path, target_path, context), batches in run_state.batches.items():
        catalog = run_state.catalogs[(source_path, target_path)]
        locale = catalog.locale or locale_from_path(target_path, locales)
        language = language_display_name(locale) if locale else target_path
        for batch in batches:
            tasks.append(
                TranslationTask(
                    source_path=source_path,
                    target_path=target_path,
                    locale=locale,
                    language=language,
                    context=context,
                    batch_index=batch.index,
                    keys=tuple(batch.keys),
                    schema=batch.schema,
                )
            )
    return tasks
