"""Per-directory session folders kept under ``~/.claude/projects``.

The folder name is the directory's absolute path with ``/`` replaced by ``-``.
Session files are JSON Lines whose entries record the working directory in a
``cwd`` field; renaming a try directory can carry that folder along.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

SESSION_FIELDS = ("type", "uuid", "timestamp", "message", "sessionId", "snapshot")
VALIDATED_LINES = 5


@dataclass(frozen=True)
class ProjectIndexRename:
    success: bool
    files_modified: int = 0
    folder_renamed: bool = False
    error: str | None = None


def project_index_path(dir_path: Path | str, home: Path | None = None) -> Path:
    base = home if home is not None else Path.home()
    return base / ".claude" / "projects" / str(dir_path).replace("/", "-")


def has_project_index(dir_path: Path | str, home: Path | None = None) -> bool:
    return project_index_path(dir_path, home).exists()


def validate_session_file(path: Path) -> str | None:
    """Return an error message when ``path`` does not look like a session log."""
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        return f"Failed to read file: {exc}"

    lines = content.strip().splitlines()
    for line_no, raw in enumerate(lines[:VALIDATED_LINES], start=1):
        line = raw.strip()
        if not line:
            continue
        try:
            parsed = json.loads(line)
        except json.JSONDecodeError:
            return f"Line {line_no}: Invalid JSON"
        if not isinstance(parsed, dict):
            return f"Line {line_no}: Expected object, got {type(parsed).__name__}"
        if "cwd" in parsed and not isinstance(parsed["cwd"], str):
            return f"Line {line_no}: cwd field is not a string"
        if not any(key in parsed for key in SESSION_FIELDS):
            return f"Line {line_no}: Missing expected session fields (type, uuid, timestamp, etc.)"
    return None


def rename_project_index(old_dir: Path | str, new_dir: Path | str, home: Path | None = None) -> ProjectIndexRename:
    """Move the session folder for ``old_dir`` to ``new_dir`` and rewrite ``cwd`` values.

    Every session file is validated before any is modified, so an unexpected
    layout leaves the folder untouched.
    """
    old_folder = project_index_path(old_dir, home)
    new_folder = project_index_path(new_dir, home)
    if not old_folder.exists():
        return ProjectIndexRename(success=True)
    if new_folder.exists():
        return ProjectIndexRename(success=False, error=f"Target project folder already exists: {new_folder}")

    session_files = sorted(old_folder.glob("*.jsonl"))
    for session_file in session_files:
        error = validate_session_file(session_file)
        if error is not None:
            return ProjectIndexRename(success=False, error=f"Unexpected file structure in {session_file.name}: {error}")

    needle = f'"cwd":"{old_dir}"'
    replacement = f'"cwd":"{new_dir}"'
    files_modified = 0
    for session_file in session_files:
        content = session_file.read_text(encoding="utf-8")
        updated = content.replace(needle, replacement)
        if updated != content:
            session_file.write_text(updated, encoding="utf-8")
            files_modified += 1

    old_folder.rename(new_folder)
    return ProjectIndexRename(success=True, files_modified=files_modified, folder_renamed=True)
