# finance_tracker/store.py
from __future__ import annotations

import logging
import os
import tempfile
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from finance_tracker.core.models import DELIMITER, Record

logger = logging.getLogger(__name__)


class StoreIOError(OSError):
    """The backing file could not be read or written."""


def _header(section: str) -> str:
    return f"[{section}]"


def _scan(lines: List[str], section: str) -> Iterator[Tuple[int, str, bool]]:
    """Yield ``(index, line, inside)`` for every line of the store.

    ``inside`` is true for lines that belong to ``section``: a header equal
    to ``[section]`` (after trimming) has been seen and no other header has
    appeared since. The header line itself is reported as outside.
    """
    header = _header(section)
    inside = False
    for idx, line in enumerate(lines):
        if line.strip() == header:
            inside = True
            yield idx, line, False
            continue
        if line.startswith("["):
            inside = False
        yield idx, line, inside


class SectionLines:
    """Re-iterable view of the record lines of one section.

    Every iteration re-reads the backing file.
    """

    def __init__(self, store: "SectionedRecordStore", section: str) -> None:
        self._store = store
        self._section = section

    def __iter__(self) -> Iterator[str]:
        for _, line, inside in _scan(self._store._read_lines(), self._section):
            if inside and line.strip():
                yield line.strip()

    def __repr__(self) -> str:
        return f"SectionLines({str(self._store.path)!r}, {self._section!r})"


class SectionedRecordStore:
    """Record store over a text file split into ``[Section]`` blocks.

    Each call reads the whole file, edits it in memory and, for mutations,
    rewrites it through a temporary file. Nothing is cached between calls.
    """

    def __init__(self, path) -> None:
        self.path = Path(path)

    # ------------------------------------------------------------------
    # file access

    def _read_lines(self, missing_ok: bool = False) -> List[str]:
        # Universal newlines turn \r\n and \r into \n; nothing else splits a line.
        try:
            lines = self.path.read_text(encoding="utf-8").split("\n")
        except FileNotFoundError:
            if missing_ok:
                return []
            logger.error("Store file not found: %s", self.path)
            raise StoreIOError(f"Store file not found: {self.path}")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Could not read %s: %s", self.path, exc)
            raise StoreIOError(f"Could not read {self.path}: {exc}") from exc
        if lines[-1] == "":
            lines.pop()
        return lines

    def _write_lines(self, lines: List[str]) -> None:
        parent = self.path.parent
        tmp_name = None
        try:
            parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as fp:
                tmp_name = fp.name
                for line in lines:
                    fp.write(line)
                    fp.write("\n")
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error("Could not write %s: %s", self.path, exc)
            raise StoreIOError(f"Could not write {self.path}: {exc}") from exc

    # ------------------------------------------------------------------
    # operations

    def append_record(self, section: str, record: Record) -> bool:
        """Add ``record`` as the last line of ``section``.

        The section is created at the end of the file, preceded by a blank
        line, when it does not exist yet. A missing file is created.
        """
        if not section or not section.strip():
            raise ValueError("Section name must not be empty")
        entry = record.canonical()
        lines = self._read_lines(missing_ok=True)

        found = False
        insert_at = len(lines)
        for idx, line, inside in _scan(lines, section):
            if not found:
                found = line.strip() == _header(section)
                continue
            if not inside:
                insert_at = idx
                break

        if found:
            lines.insert(insert_at, entry)
        else:
            lines.extend(["", _header(section), entry])

        self._write_lines(lines)
        logger.info("Added to [%s]: %s", section, entry)
        return True

    def delete_record(self, section: str, record: Record) -> bool:
        """Remove the first line of ``section`` equal to ``record``'s canonical form.

        Returns ``False`` and leaves the file untouched when nothing matches.
        """
        target = record.canonical()
        lines = self._read_lines()

        kept = []
        deleted = False
        for _, line, inside in _scan(lines, section):
            if not deleted and inside and line.strip() == target:
                deleted = True
                continue
            kept.append(line)

        if not deleted:
            logger.info("No record in [%s] matches: %s", section, target)
            return False

        self._write_lines(kept)
        logger.info("Deleted from [%s]: %s", section, target)
        return True

    def aggregate_for_month(
        self,
        section: str,
        month_prefix: str,
        category: Optional[str] = None,
    ) -> Decimal:
        """Sum the amounts in ``section`` whose date starts with ``month_prefix``.

        Parameters
        ----------
        section:
            Name of the section to scan.
        month_prefix:
            Literal prefix of the date field, usually ``yyyy-MM``.
        category:
            Optional case-insensitive filter on the category field.
        """
        total = Decimal("0.00")
        wanted = category.casefold() if category is not None else None
        for _, line, inside in _scan(self._read_lines(), section):
            if not inside or not line.strip():
                continue
            parts = line.split(DELIMITER)
            if len(parts) < 3:
                continue
            date, kind, raw_amount = (p.strip() for p in parts[:3])
            if not date.startswith(month_prefix):
                continue
            if wanted is not None and kind.casefold() != wanted:
                continue
            try:
                amount = Decimal(raw_amount)
            except InvalidOperation:
                logger.warning("Invalid amount in [%s]: %r", section, raw_amount)
                continue
            if not amount.is_finite():
                logger.warning("Invalid amount in [%s]: %r", section, raw_amount)
                continue
            total += amount
        return total

    def list_records(self, section: str) -> SectionLines:
        """Return the non-blank lines of ``section`` in file order."""
        return SectionLines(self, section)

    def records(self, section: str) -> List[Record]:
        """Parse the lines of ``section`` into records, skipping malformed ones."""
        parsed = []
        for line in self.list_records(section):
            record = Record.parse(line)
            if record is None:
                logger.warning("Skipping malformed line in [%s]: %r", section, line)
                continue
            parsed.append(record)
        return parsed

    def sections(self) -> List[str]:
        names = []
        for line in self._read_lines():
            stripped = line.strip()
            if line.startswith("[") and stripped.endswith("]"):
                names.append(stripped[1:-1])
        return names
