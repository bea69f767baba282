"""Core data structures for the Linguci catalog translator."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Tuple

if TYPE_CHECKING:
    from .errors import ErrorRecord
    from .planner import BatchSchema


DEFAULT_CONTEXT = ""
HEADER_KEY = ""

PENDING_FORMS: Tuple[str, ...] = ("",)


class TranslationState(Enum):
    """Whether an entry still waits for a translation."""

    PENDING = "pending"
    TRANSLATED = "translated"


@dataclass
class Entry:
    """A single translatable message and its current translated form."""

    key: str
    translated_forms: List[str] = field(default_factory=lambda: list(PENDING_FORMS))
    metadata: Dict[str, Any] = field(default_factory=dict)
    state: TranslationState = TranslationState.PENDING

    @property
    def is_header(self) -> bool:
        return self.key == HEADER_KEY

    @property
    def is_pending(self) -> bool:
        return self.state is TranslationState.PENDING

    def mark_pending(self) -> None:
        """Reset the entry to the single-empty-string pending form."""

        self.translated_forms = list(PENDING_FORMS)
        self.state = TranslationState.PENDING

    def set_translation(self, text: str) -> None:
        """Store a translation; an empty string is still a translation."""

        self.translated_forms = [text]
        self.state = TranslationState.TRANSLATED

    def copy(self) -> "Entry":
        return Entry(
            key=self.key,
            translated_forms=list(self.translated_forms),
            metadata=copy.deepcopy(self.metadata),
            state=self.state,
        )


Context = Dict[str, Entry]


@dataclass
class Catalog:
    """One parsed message catalog: context name -> ordered entries."""

    contexts: Dict[str, Context] = field(default_factory=dict)
    # `#~` entries, written back unchanged.
    obsolete: List[Tuple[str, Entry]] = field(default_factory=list)
    locale: Optional[str] = None
    path: Optional[str] = None

    def context(self, name: str) -> Optional[Context]:
        return self.contexts.get(name)

    def ensure_context(self, name: str) -> Context:
        if name not in self.contexts:
            self.contexts[name] = {}
        return self.contexts[name]

    def get(self, context: str, key: str) -> Optional[Entry]:
        entries = self.contexts.get(context)
        if entries is None:
            return None
        return entries.get(key)

    @property
    def header(self) -> Optional[Entry]:
        return self.get(DEFAULT_CONTEXT, HEADER_KEY)

    def iter_entries(self) -> Iterator[Tuple[str, Entry]]:
        for name, entries in self.contexts.items():
            for entry in entries.values():
                yield name, entry


@dataclass
class Batch:
    """An ordered slice of one context's backlog."""

    index: int
    keys: List[str]
    schema: "BatchSchema"


@dataclass(frozen=True)
class TranslationTask:
    """One batch of work scheduled against the provider."""

    source_path: str
    target_path: str
    locale: Optional[str]
    language: str
    context: str
    batch_index: int
    keys: Tuple[str, ...]
    schema: "BatchSchema"

    @property
    def label(self) -> str:
        context = self.context or "<default>"
        return f"{self.target_path} [{context}] batch #{self.batch_index}"


@dataclass
class TaskOutcome:
    """Settled result of a task after its retries."""

    task: TranslationTask
    success: bool
    translations: Dict[str, str] = field(default_factory=dict)
    attempts: int = 0
    error: Optional["ErrorRecord"] = None


CatalogKey = Tuple[str, str]
BatchKey = Tuple[str, str, str]


@dataclass
class RunState:
    """Per-run tables of synchronized catalogs and their planned batches."""

    catalogs: Dict[CatalogKey, Catalog] = field(default_factory=dict)
    batches: Dict[BatchKey, List[Batch]] = field(default_factory=dict)

    def catalog_for(self, task: TranslationTask) -> Catalog:
        return self.catalogs[(task.source_path, task.target_path)]

