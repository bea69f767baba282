from __future__ import annotations

from pathlib import Path

import pytest

from linguci.catalogs import parse_catalog, read_catalog, serialize_catalog, write_catalog
from linguci.errors import CatalogNotFoundError, CatalogReadError
from linguci.structures import TranslationState

SAMPLE_PO = """\
# Demo translations.
msgid ""
msgstr ""
"Project-Id-Version: demo 1.0\\n"
"Language: fr-FR\\n"
"Content-Type: text/plain; charset=UTF-8\\n"

#. Greeting on the home page
#: app/views.py:10
#, python-format
msgid "hello %(name)s"
msgstr ""

msgid "bye"
msgstr "au revoir"

msgctxt "menu"
msgid "File"
msgstr "Fichier"
"""


def test_parse_catalog_builds_contexts_and_header() -> None:
    catalog = parse_catalog(SAMPLE_PO.encode("utf-8"), path="fr-FR.po", locale="fr-FR")

    assert catalog.locale == "fr-FR"
    assert list(catalog.contexts) == ["", "menu"]
    assert list(catalog.context("")) == ["", "hello %(name)s", "bye"]

    header = catalog.header
    assert header is not None
    assert "Project-Id-Version: demo 1.0" in header.translated_forms[0]
    assert header.metadata["comment"] == "Demo translations."

    hello = catalog.get("", "hello %(name)s")
    assert hello.state is TranslationState.PENDING
    assert hello.translated_forms == [""]
    assert hello.metadata["comment"] == "Greeting on the home page"
    assert hello.metadata["occurrences"] == [("app/views.py", "10")]
    assert hello.metadata["flags"] == ["python-format"]

    assert catalog.get("", "bye").state is TranslationState.TRANSLATED
    assert catalog.get("menu", "File").translated_forms == ["Fichier"]


def test_serialize_catalog_preserves_metadata_and_translations() -> None:
    catalog = parse_catalog(SAMPLE_PO.encode("utf-8"))
    catalog.get("", "hello %(name)s").set_translation("bonjour %(name)s")

    reparsed = parse_catalog(serialize_catalog(catalog))

    hello = reparsed.get("", "hello %(name)s")
    assert hello.translated_forms == ["bonjour %(name)s"]
    assert hello.state is TranslationState.TRANSLATED
    assert hello.metadata == catalog.get("", "hello %(name)s").metadata
    assert reparsed.get("menu", "File").translated_forms == ["Fichier"]
    assert "Language: fr-FR" in reparsed.header.translated_forms[0]
    assert reparsed.header.metadata["comment"] == "Demo translations."


def test_read_catalog_missing_file(tmp_path: Path) -> None:
    with pytest.raises(CatalogNotFoundError):
        read_catalog(tmp_path / "missing.po")


def test_read_catalog_undecodable_file(tmp_path: Path) -> None:
    path = tmp_path / "broken.po"
    path.write_bytes(b'msgid "\xff\xfe"\nmsgstr ""\n')

    with pytest.raises(CatalogReadError):
        read_catalog(path)


def test_write_catalog_keeps_backup(tmp_path: Path) -> None:
    path = tmp_path / "fr-FR.po"
    path.write_text(SAMPLE_PO, encoding="utf-8")
    catalog = read_catalog(path, locale="fr-FR")
    catalog.get("", "hello %(name)s").set_translation("salut %(name)s")

    write_catalog(catalog, path)

    assert (tmp_path / "fr-FR.po.bak").read_text(encoding="utf-8") == SAMPLE_PO
    assert read_catalog(path).get("", "hello %(name)s").translated_forms == ["salut %(name)s"]


def test_write_catalog_without_backup(tmp_path: Path) -> None:
    path = tmp_path / "fr-FR.po"
    path.write_text(SAMPLE_PO, encoding="utf-8")

    write_catalog(read_catalog(path), path, backup=False)

    assert not (tmp_path / "fr-FR.po.bak").exists()


HEADER_WITHOUT_COMMENT_PO = """\
msgid ""
msgstr ""
"Language: fr-FR\\n"
"Content-Type: text/plain; charset=UTF-8\\n"

msgid "bye"
msgstr "au revoir"
"""

OBSOLETE_TARGET_PO = """\
msgid ""
msgstr ""
"Language: fr-FR\\n"

msgid "hello"
msgstr "bonjour"

#~ msgid "hello"
#~ msgstr "ancien"

#~ msgid "stale"
#~ msgstr ""
"""


def test_header_without_comment_round_trips_unchanged() -> None:
    data = HEADER_WITHOUT_COMMENT_PO.encode("utf-8")

    assert serialize_catalog(parse_catalog(data)) == data


def test_obsolete_entries_do_not_replace_live_entries() -> None:
    catalog = parse_catalog(OBSOLETE_TARGET_PO.encode("utf-8"))

    hello = catalog.get("", "hello")
    assert hello.translated_forms == ["bonjour"]
    assert "obsolete" not in hello.metadata
    assert catalog.get("", "stale") is None
    assert [(context, entry.key) for context, entry in catalog.obsolete] == [
        ("", "hello"),
        ("", "stale"),
    ]

    text = serialize_catalog(catalog).decode("utf-8")
    assert 'msgid "hello"\nmsgstr "bonjour"\n' in text
    assert '#~ msgid "hello"\n#~ msgstr "ancien"\n' in text
    assert '#~ msgid "stale"\n' in text
    assert text.index('msgstr "bonjour"') < text.index("#~ msgid")
