"""Source-to-target reconciliation, backlog extraction and result merging."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping

from .structures import Catalog, TranslationState

logger = logging.getLogger(__name__)


def synchronize(source: Catalog, target: Catalog) -> Catalog:
    """Ensure every source entry exists in ``target`` and return it.

    Missing entries are copied from the source and reset to pending, except
    for the header which is copied verbatim. Existing translations are never
    touched; an empty-sequence pending form is normalized to ``[""]``.
    """

    added = 0
    for context_name, source_entries in source.contexts.items():
        target_entries = target.ensure_context(context_name)
        for key, source_entry in source_entries.items():
            existing = target_entries.get(key)
            if existing is None:
                entry = source_entry.copy()
                if not entry.is_header:
                    entry.mark_pending()
                target_entries[key] = entry
                added += 1
                continue
            if not existing.translated_forms:
                existing.mark_pending()

    if added:
        logger.info("Added %d missing entries to %s", added, target.path or "<catalog>")
    return target


def extract_backlog(catalog: Catalog) -> Dict[str, List[str]]:
    """Return the pending non-header keys of ``catalog`` grouped by context."""

    backlog: Dict[str, List[str]] = {}
    for context_name, entries in catalog.contexts.items():
        for key, entry in entries.items():
            if entry.is_header:
                continue
            if entry.state is TranslationState.PENDING:
                backlog.setdefault(context_name, []).append(key)
    return backlog


def merge_result(
    catalog: Catalog,
    context: str,
    translations: Mapping[str, str],
) -> List[str]:
    """Write provider output into ``catalog`` and return the keys updated."""

    entries = catalog.context(context)
    if entries is None:
        return []

    updated: List[str] = []
    for key, value in translations.items():
        entry = entries.get(key)
        if entry is None or entry.is_header:
            continue
        entry.set_translation((value or "").strip())
        updated.append(key)
    return updated
