"""
Bank loading and validation.

Loads the question bank from:
- A local JSON document (primary, via load_bank_from_path)
- A remote URL (via fetch_bank / download_bank, using httpx)

Features:
- Strips /* block comments */ before parsing
- Reports the first offending field path on validation failure
- Merges supplementary packs additively (base bank ids always win)
- BankCache keeps one parsed bank per process until reload()
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .models import BaseQuestion, ExamBank, Question, QuestionType

_BLOCK_COMMENT = re.compile(r"/\*[\s\S]*?\*/")
_TYPE_TAGS = {t.value for t in QuestionType}


# =============================================================================
# Errors
# =============================================================================


class BankLoadError(Exception):
    """Raised when the bank document cannot be read or fetched."""


class BankValidationError(BankLoadError):
    """Raised when the bank document does not match the schema."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Exam bank validation failed at {path}: {reason}")


# =============================================================================
# Parsing
# =============================================================================


def strip_json_comments(raw: str) -> str:
    return _BLOCK_COMMENT.sub("", raw).strip()


def _format_location(loc: Iterable[Any]) -> str:
    parts: list[str] = []
    previous: Any = None
    for part in loc:
        if isinstance(part, int):
            parts.append(f"[{part}]")
        elif isinstance(previous, int) and part in _TYPE_TAGS:
            # discriminated-union tag inserted by pydantic, not a real field
            pass
        else:
            parts.append(f".{part}" if parts else str(part))
        previous = part
    return "".join(parts) or "<root>"


def _first_error(exc: ValidationError) -> tuple[str, str]:
    error = exc.errors()[0]
    return _format_location(error["loc"]), error["msg"]


def _decode(raw: str | bytes | Mapping[str, Any]) -> Any:
    if isinstance(raw, Mapping):
        return raw
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    try:
        return json.loads(strip_json_comments(raw))
    except json.JSONDecodeError as e:
        raise BankValidationError("<root>", f"Invalid JSON: {e.msg} (line {e.lineno})") from e


def parse_bank(raw: str | bytes | Mapping[str, Any]) -> ExamBank:
    """
    Parse and validate a bank document.

    Args:
        raw: JSON text (comments allowed) or an already-decoded mapping

    Returns:
        ExamBank

    Raises:
        BankValidationError: naming the first offending field path
    """
    data = _decode(raw)
    try:
        bank = ExamBank.model_validate(data)
    except ValidationError as e:
        path, reason = _first_error(e)
        raise BankValidationError(path, reason) from e

    seen: set[str] = set()
    for index, question in enumerate(bank.bank):
        if question.id in seen:
            raise BankValidationError(f"bank[{index}].id", f"duplicate question id {question.id!r}")
        seen.add(question.id)

    template_ids = {template.id for template in bank.templates}
    clashes = template_ids & seen
    if clashes:
        raise BankValidationError("templates", f"template ids clash with question ids: {sorted(clashes)}")

    logger.debug(f"Parsed bank {bank.module!r} v{bank.version}: {len(bank.bank)} questions")
    return bank


class SupplementaryPack(BaseModel):
    """Narrow schema for optional extension packs."""

    model_config = ConfigDict(extra="ignore")

    pack: str = Field(min_length=1)
    source: str | None = None
    entries: list[Question]


def parse_supplementary_pack(
    raw: str | bytes | Mapping[str, Any],
    base_ids: Iterable[str] = (),
) -> list[BaseQuestion]:
    """
    Parse a supplementary pack into bank entries.

    Entries whose id already exists in base_ids are dropped (base wins).
    A malformed pack degrades to no entries with a logged warning.
    """
    try:
        data = _decode(raw)
        pack = SupplementaryPack.model_validate(data)
    except BankValidationError as e:
        logger.warning(f"Ignoring supplementary pack: {e.reason}")
        return []
    except ValidationError as e:
        path, reason = _first_error(e)
        logger.warning(f"Ignoring supplementary pack: invalid at {path}: {reason}")
        return []

    taken = set(base_ids)
    entries: list[BaseQuestion] = []
    for entry in pack.entries:
        if entry.id in taken:
            logger.debug(f"Pack {pack.pack!r}: dropping {entry.id} (already in bank)")
            continue
        taken.add(entry.id)
        entries.append(
            entry.model_copy(update={"pack": pack.pack, "source": entry.source or pack.source})
        )

    logger.info(f"Pack {pack.pack!r}: {len(entries)}/{len(pack.entries)} entries merged")
    return entries


def merge_packs(bank: ExamBank, packs: Iterable[str | bytes | Mapping[str, Any]]) -> ExamBank:
    """Merge packs in order; earlier ids (base bank first) always win."""
    extra: list[BaseQuestion] = []
    known = {question.id for question in bank.bank} | {t.id for t in bank.templates}
    for raw in packs:
        entries = parse_supplementary_pack(raw, known)
        known.update(entry.id for entry in entries)
        extra.extend(entries)
    return bank.with_questions(extra)


# =============================================================================
# Sources
# =============================================================================


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise BankLoadError(f"Failed to load exam bank from {path}: {e}") from e


def load_bank_from_path(path: Path) -> ExamBank:
    return parse_bank(_read_text(path))


def load_pack_documents(pack_dir: Path | None) -> list[str]:
    """Read every *.json pack in pack_dir (sorted by name for stable merges)."""
    if pack_dir is None or not pack_dir.is_dir():
        return []
    documents = []
    for filepath in sorted(pack_dir.glob("*.json")):
        try:
            documents.append(filepath.read_text(encoding="utf-8"))
        except OSError as e:
            logger.warning(f"Skipping pack {filepath.name}: {e}")
    return documents


def download_bank(url: str, client: httpx.Client | None = None) -> ExamBank:
    """Fetch and parse a bank synchronously."""
    owned = client is None
    client = client or httpx.Client(timeout=30.0)
    try:
        response = client.get(url, headers={"Cache-Control": "no-store"})
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise BankLoadError(f"Failed to load exam bank: {e}") from e
    finally:
        if owned:
            client.close()
    return parse_bank(response.text)


async def fetch_bank(url: str, client: httpx.AsyncClient | None = None) -> ExamBank:
    """Fetch and parse a bank without blocking the event loop."""
    owned = client is None
    client = client or httpx.AsyncClient(timeout=30.0)
    try:
        response = await client.get(url, headers={"Cache-Control": "no-store"})
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise BankLoadError(f"Failed to load exam bank: {e}") from e
    finally:
        if owned:
            await client.aclose()
    return parse_bank(response.text)


class BankCache:
    """
    Process-wide holder of the parsed bank.

    The bank is loaded on first access and kept until reload() is called;
    consumers never trigger a re-fetch.
    """

    def __init__(
        self,
        path: Path | None = None,
        url: str | None = None,
        pack_dir: Path | None = None,
        client: httpx.Client | None = None,
    ):
        if path is None and url is None:
            raise ValueError("BankCache needs a path or a url")
        self.path = path
        self.url = url
        self.pack_dir = pack_dir
        self._client = client
        self._bank: ExamBank | None = None

    @classmethod
    def from_settings(cls, settings) -> BankCache:
        return cls(path=settings.bank_path, url=settings.bank_url, pack_dir=settings.pack_dir)

    @property
    def loaded(self) -> bool:
        return self._bank is not None

    def get(self) -> ExamBank:
        if self._bank is None:
            self._bank = self._load()
        return self._bank

    def reload(self) -> ExamBank:
        self._bank = None
        return self.get()

    def _load(self) -> ExamBank:
        if self.url:
            bank = download_bank(self.url, self._client)
        else:
            bank = load_bank_from_path(self.path)
        bank = merge_packs(bank, load_pack_documents(self.pack_dir))
        logger.info(f"Exam bank loaded: {len(bank.bank)} questions, {len(bank.exam_sets)} sets")
        return bank
