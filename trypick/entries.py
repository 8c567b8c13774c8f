"""Directory listing and leaf filesystem operations for the tries root.

Listing is non-recursive and never cached: every call stats the root again.
Mutating helpers raise ``EntryError`` subclasses on precondition failures.
"""

from __future__ import annotations

import os
import re
import shutil
from dataclasses import dataclass
from pathlib import Path

DATE_PREFIX_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})-?(.*)$", re.DOTALL)


class EntryError(Exception):
    """Base class for filesystem precondition failures."""


class EntryExistsError(EntryError):
    pass


class EntryMissingError(EntryError):
    pass


class InvalidEntryNameError(EntryError):
    pass


@dataclass(frozen=True)
class DirectoryEntry:
    """One candidate directory directly under the tries root."""

    path: Path
    name: str
    created_at: float
    accessed_at: float
    modified_at: float
    date_prefix: str | None
    base_name: str


def parse_date_prefix(name: str) -> tuple[str | None, str]:
    """Split a leading ``YYYY-MM-DD`` (optionally followed by ``-``) from ``name``.

    Returns ``(date_prefix, base_name)``. A bare date keeps the full name as its
    base name so ``base_name`` is never empty for a non-empty ``name``.
    """
    match = DATE_PREFIX_RE.match(name)
    if match is None:
        return None, name
    return match.group(1), match.group(2) or name


def _created_timestamp(stat: os.stat_result) -> float:
    birthtime = getattr(stat, "st_birthtime", None)
    if isinstance(birthtime, (int, float)):
        return float(birthtime)
    return float(stat.st_ctime)


def list_entries(root: Path) -> list[DirectoryEntry]:
    """List first-level, non-hidden subdirectories of ``root``.

    A missing root is a normal state and yields an empty list.
    """
    root = Path(root).expanduser()
    try:
        children = sorted(os.scandir(root), key=lambda item: item.name)
    except (FileNotFoundError, NotADirectoryError):
        return []

    entries: list[DirectoryEntry] = []
    for child in children:
        if child.name.startswith("."):
            continue
        try:
            if not child.is_dir():
                continue
            stat = child.stat()
        except FileNotFoundError:
            # Removed between scandir and stat.
            continue
        date_prefix, base_name = parse_date_prefix(child.name)
        entries.append(
            DirectoryEntry(
                path=(root / child.name).absolute(),
                name=child.name,
                created_at=_created_timestamp(stat),
                accessed_at=float(stat.st_atime),
                modified_at=float(stat.st_mtime),
                date_prefix=date_prefix,
                base_name=base_name,
            )
        )
    return entries


def validate_entry_name(name: str) -> str:
    """Return ``name`` stripped, rejecting values that are not a single visible path segment."""
    stripped = name.strip()
    if not stripped:
        raise InvalidEntryNameError("Directory name must not be empty")
    if "/" in stripped or os.sep in stripped:
        raise InvalidEntryNameError(f"Directory name must not contain '/': {stripped}")
    if stripped.startswith("."):
        raise InvalidEntryNameError(f"Directory name must not start with '.': {stripped}")
    return stripped


def create_entry_dir(root: Path, name: str) -> Path:
    """Create ``root/name`` (and ``root`` itself when missing)."""
    full_path = Path(root).expanduser() / validate_entry_name(name)
    if full_path.exists():
        raise EntryExistsError(f"Directory already exists: {full_path}")
    full_path.mkdir(parents=True)
    return full_path


def delete_entry_dir(path: Path) -> None:
    if not path.exists():
        raise EntryMissingError(f"Directory does not exist: {path}")
    shutil.rmtree(path)


def move_entry(source: Path, target: Path) -> Path:
    """Move ``source`` to ``target``, creating the target's parent directory."""
    if not source.exists():
        raise EntryMissingError(f"Directory does not exist: {source}")
    if target.exists():
        raise EntryExistsError(f"Target already exists: {target}")
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(source), str(target))
    return target


def touch_entry(path: Path) -> None:
    """Bump access and modification time so the entry ranks as recent."""
    try:
        os.utime(path, None)
    except OSError:
        pass
