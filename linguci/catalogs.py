"""Gettext PO reading and writing for the catalog model."""

from __future__ import annotations

import logging
import pathlib
import shutil
from typing import Any, Dict, Optional

import polib

from .errors import CatalogNotFoundError, CatalogReadError
from .structures import (
    DEFAULT_CONTEXT,
    HEADER_KEY,
    Catalog,
    Entry,
    TranslationState,
)

logger = logging.getLogger(__name__)

# PO entry attributes kept opaquely in Entry.metadata.
_METADATA_FIELDS = (
    "comment",
    "tcomment",
    "occurrences",
    "flags",
    "previous_msgctxt",
    "previous_msgid",
    "previous_msgid_plural",
    "msgid_plural",
    "obsolete",
)


def _header_text(po: polib.POFile) -> str:
    return "".join(f"{name}: {value}\n" for name, value in po.ordered_metadata())


def _parse_header_text(text: str) -> Dict[str, str]:
    metadata: Dict[str, str] = {}
    for line in text.splitlines():
        name, sep, value = line.partition(":")
        if not sep:
            continue
        metadata[name.strip()] = value.strip()
    return metadata


def _entry_from_po(po_entry: polib.POEntry) -> Entry:
    metadata: Dict[str, Any] = {}
    for name in _METADATA_FIELDS:
        value = getattr(po_entry, name, None)
        if value in (None, "", [], False):
            continue
        metadata[name] = list(value) if isinstance(value, list) else value

    if po_entry.msgid_plural:
        forms = [po_entry.msgstr_plural[index] for index in sorted(po_entry.msgstr_plural)]
    else:
        forms = [po_entry.msgstr]

    state = (
        TranslationState.TRANSLATED
        if any(form for form in forms)
        else TranslationState.PENDING
    )
    return Entry(
        key=po_entry.msgid,
        translated_forms=forms or [""],
        metadata=metadata,
        state=state,
    )


def _entry_to_po(context: str, entry: Entry) -> polib.POEntry:
    metadata = entry.metadata
    kwargs: Dict[str, Any] = {
        "msgid": entry.key,
        "msgctxt": context if context != DEFAULT_CONTEXT else None,
    }
    for name in _METADATA_FIELDS:
        if name in metadata:
            value = metadata[name]
            if name == "occurrences":
                value = [tuple(item) for item in value]
            kwargs[name] = value

    forms = entry.translated_forms or [""]
    if metadata.get("msgid_plural"):
        kwargs["msgstr_plural"] = {index: form for index, form in enumerate(forms)}
    else:
        kwargs["msgstr"] = forms[0]
    return polib.POEntry(**kwargs)


def parse_catalog(
    data: bytes,
    *,
    path: Optional[str] = None,
    locale: Optional[str] = None,
) -> Catalog:
    """Parse PO file contents into a Catalog."""

    po = polib.pofile(data.decode("utf-8"))
    catalog = Catalog(locale=locale, path=path)

    if po.metadata or po.header:
        header_meta: Dict[str, Any] = {}
        if po.header:
            header_meta["comment"] = po.header
        if po.metadata_is_fuzzy:
            header_meta["flags"] = ["fuzzy"]
        catalog.ensure_context(DEFAULT_CONTEXT)[HEADER_KEY] = Entry(
            key=HEADER_KEY,
            translated_forms=[_header_text(po)],
            metadata=header_meta,
            state=TranslationState.TRANSLATED,
        )

    for po_entry in po:
        context = po_entry.msgctxt if po_entry.msgctxt is not None else DEFAULT_CONTEXT
        if po_entry.obsolete:
            catalog.obsolete.append((context, _entry_from_po(po_entry)))
            continue
        catalog.ensure_context(context)[po_entry.msgid] = _entry_from_po(po_entry)
    return catalog


def serialize_catalog(catalog: Catalog) -> bytes:
    """Render a Catalog back to PO file contents."""

    po = polib.POFile(wrapwidth=78)
    header = catalog.header
    if header is not None:
        po.header = header.metadata.get("comment") or ""
        header_text = header.translated_forms[0] if header.translated_forms else ""
        po.metadata = _parse_header_text(header_text)
        po.metadata_is_fuzzy = "fuzzy" in header.metadata.get("flags", [])

    for context, entry in catalog.iter_entries():
        if entry.is_header and context == DEFAULT_CONTEXT:
            continue
        po.append(_entry_to_po(context, entry))
    for context, entry in catalog.obsolete:
        po.append(_entry_to_po(context, entry))

    text = str(po)
    # polib writes a bare "#" line for an empty header comment.
    if not po.header and text.startswith("#\n"):
        text = text[2:]
    return text.encode("utf-8")


def read_catalog(path: pathlib.Path, *, locale: Optional[str] = None) -> Catalog:
    """Read and parse a catalog file; failures are fatal to the run."""

    if not path.is_file():
        raise CatalogNotFoundError(f"Catalog file does not exist: {path}")
    try:
        data = path.read_bytes()
        return parse_catalog(data, path=str(path), locale=locale)
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        raise CatalogReadError(f"Could not read catalog {path}: {exc}") from exc


def write_catalog(catalog: Catalog, path: pathlib.Path, *, backup: bool = True) -> None:
    """Persist ``catalog`` to ``path``, keeping a ``.bak`` copy when asked."""

    if backup and path.exists():
        backup_path = path.with_name(path.name + ".bak")
        logger.debug("Creating backup at %s", backup_path)
        shutil.copyfile(path, backup_path)
    path.write_bytes(serialize_catalog(catalog))
    logger.info("Wrote catalog %s", path)
