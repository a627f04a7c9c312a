"""Read-only view over the content tree.

Documents are Markdown files with a front-matter block: YAML between
``---`` fences or TOML between ``+++`` fences. Section index files
(``_index.md``) describe listings rather than posts and are skipped.
"""

from __future__ import annotations

import datetime as dt
import logging
import tomllib
from email.utils import parsedate_to_datetime
from pathlib import Path, PurePosixPath
from typing import Any

import yaml

from pagesmith.core.errors import ContentGenerationError
from pagesmith.models.content import Document

logger = logging.getLogger(__name__)

_FENCES = {"---": "yaml", "+++": "toml"}
_SECTION_INDEX = "_index.md"
_DATE_FORMATS = ("%B %d, %Y", "%b %d, %Y", "%d %B %Y", "%d %b %Y")
_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0", ""}


class FrontMatterError(ContentGenerationError):
    """Raised when a document's front-matter cannot be parsed."""


def split_front_matter(text: str) -> tuple[str | None, str, str]:
    """Split raw document text into (format, front-matter, body).

    Returns ``(None, "", text)`` when the document has no front-matter.
    An opening fence without a closing one is an error.
    """
    text = text.lstrip("\ufeff")
    lines = text.splitlines(keepends=True)
    if not lines:
        return None, "", ""
    fence = lines[0].strip()
    fmt = _FENCES.get(fence)
    if fmt is None:
        return None, "", text
    for idx in range(1, len(lines)):
        if lines[idx].strip() == fence:
            meta = "".join(lines[1:idx])
            body = "".join(lines[idx + 1:]).lstrip("\n")
            return fmt, meta, body
    raise FrontMatterError(f"unterminated {fence} front-matter block")


def _parse_meta(fmt: str | None, meta: str) -> dict[str, Any]:
    if fmt is None or not meta.strip():
        return {}
    try:
        data = yaml.safe_load(meta) if fmt == "yaml" else tomllib.loads(meta)
    except (yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
        raise FrontMatterError(f"invalid {fmt} front-matter: {exc}") from exc
    if not isinstance(data, dict):
        raise FrontMatterError(f"{fmt} front-matter must be a mapping")
    return data


def _parse_date_text(text: str) -> dt.date | None:
    try:
        return dt.datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return dt.date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(text).date()
    except (TypeError, ValueError, IndexError):
        pass
    for fmt in _DATE_FORMATS:
        try:
            return dt.datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _coerce_date(value: Any, *, strict: bool = True) -> dt.date | None:
    """Calendar date of a front-matter ``date`` value.

    ISO 8601, RFC 1123 and long-form dates (``January 2, 2006``) are
    understood. Anything else raises FrontMatterError when *strict*, and
    is treated as undated otherwise.
    """
    if value is None or value == "":
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    parsed = _parse_date_text(str(value).strip())
    if parsed is None:
        if strict:
            raise FrontMatterError(f"unrecognised date {value!r}")
        logger.warning("Unrecognised date %r; treating document as undated", value)
    return parsed


def _coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise FrontMatterError(f"expected a boolean, got {value!r}")
    return bool(value)


def parse_document(text: str, path: PurePosixPath, *, strict_dates: bool = True) -> Document:
    """Build a Document from raw file text.

    With ``strict_dates=False`` a date the parser does not understand
    leaves the document undated instead of failing; the generator has the
    final say on content it accepts.
    """
    fmt, meta, body = split_front_matter(text)
    data = _parse_meta(fmt, meta)
    title = data.get("title")
    if title is None:
        title = path.parent.name if path.stem == "index" else path.stem
    return Document(
        path=path,
        title=str(title),
        date=_coerce_date(data.get("date"), strict=strict_dates),
        body=body,
        draft=_coerce_flag(data.get("draft", False)),
        front_matter=data,
    )


class ContentStore:
    """Loads documents from a content directory.

    A missing content directory is an empty tree, not an error: a site
    with no posts still builds. ``strict_dates`` is passed on to
    ``parse_document``.
    """

    def __init__(self, root: Path, *, strict_dates: bool = True) -> None:
        self._root = Path(root)
        self._strict_dates = strict_dates

    @property
    def root(self) -> Path:
        return self._root

    def paths(self) -> list[Path]:
        """Markdown post files under the root, in stable order."""
        if not self._root.is_dir():
            return []
        found = [
            p for p in self._root.rglob("*.md")
            if p.is_file() and p.name != _SECTION_INDEX
        ]
        return sorted(found, key=lambda p: p.relative_to(self._root).as_posix())

    def load(self, path: Path) -> Document:
        rel = PurePosixPath(Path(path).relative_to(self._root).as_posix())
        try:
            text = Path(path).read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise FrontMatterError(f"{rel}: not valid UTF-8") from exc
        try:
            return parse_document(text, rel, strict_dates=self._strict_dates)
        except FrontMatterError as exc:
            raise FrontMatterError(f"{rel}: {exc}") from exc

    def documents(self, *, include_drafts: bool = False) -> list[Document]:
        """All documents, newest first; undated documents sort last."""
        docs = [self.load(p) for p in self.paths()]
        if not include_drafts:
            docs = [d for d in docs if not d.draft]
        docs.sort(key=lambda d: d.path.as_posix())
        docs.sort(key=lambda d: d.date or dt.date.min, reverse=True)
        logger.debug("Loaded %d documents from %s", len(docs), self._root)
        return docs
