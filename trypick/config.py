"""Persistent JSON config helpers.

Stores the tries root, the archive directory, lifecycle hook commands and
init actions.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from .hooks import HOOK_NAMES, InitAction

logger = logging.getLogger(__name__)

APP_NAME = "trypick"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
LEGACY_CONFIG_PATH = Path.home() / ".tryrc.json"
CONFIG_PATH = DEFAULT_CONFIG_PATH
DEFAULT_TRIES_PATH = Path("~/src/tries")
ARCHIVE_DIRNAME = ".archive"
PATH_ENV_VAR = "TRY_PATH"


@dataclass(frozen=True)
class TryConfig:
    path: Path
    archive_path: Path
    hooks: Mapping[str, str] = field(default_factory=dict)
    init_actions: tuple[InitAction, ...] = ()


def expand_path(value: str | Path) -> Path:
    return Path(os.path.expanduser(str(value)))


def _load_config_path() -> Path:
    """Return preferred config path, falling back to legacy location when needed."""
    if CONFIG_PATH.exists():
        return CONFIG_PATH
    if CONFIG_PATH == DEFAULT_CONFIG_PATH and LEGACY_CONFIG_PATH.exists():
        return LEGACY_CONFIG_PATH
    return CONFIG_PATH


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = _load_config_path()
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", config_path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Any filesystem/serialization error is logged and otherwise ignored.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("could not write config %s: %s", CONFIG_PATH, exc)


def _load_path(data: Mapping[str, object], key: str) -> Path | None:
    value = data.get(key)
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return expand_path(stripped) if stripped else None


def load_hooks(data: Mapping[str, object]) -> dict[str, str]:
    """Keep only known hook names mapped to non-empty command strings."""
    raw = data.get("hooks")
    if not isinstance(raw, dict):
        return {}
    hooks: dict[str, str] = {}
    for name, command in raw.items():
        if name not in HOOK_NAMES:
            logger.warning("ignoring unknown hook %r in config", name)
            continue
        if isinstance(command, str) and command.strip():
            hooks[name] = command
    return hooks


def load_init_actions(data: Mapping[str, object]) -> tuple[InitAction, ...]:
    """Parse ``init_actions`` (key -> ``{label, command, default}``) in file order.

    Entries without a non-empty string ``command`` are skipped with a warning.
    ``label`` falls back to the key; ``default`` must be literally ``true``.
    """
    raw = data.get("init_actions")
    if not isinstance(raw, dict):
        return ()
    actions: list[InitAction] = []
    for key, spec in raw.items():
        command = spec.get("command") if isinstance(spec, dict) else None
        if not isinstance(command, str) or not command.strip():
            logger.warning("ignoring init action %r without a command", key)
            continue
        label = spec.get("label")
        actions.append(
            InitAction(
                key=str(key),
                label=label if isinstance(label, str) and label.strip() else str(key),
                command=command,
                default=spec.get("default") is True,
            )
        )
    return tuple(actions)


def load_try_config(path_override: str | Path | None = None) -> TryConfig:
    """Build the effective configuration.

    Precedence for the tries root: ``path_override``, ``$TRY_PATH``, the
    config file's ``path``, then ``~/src/tries``. The archive directory
    defaults to a hidden ``.archive`` folder inside the tries root.
    """
    data = load_config()
    env_path = os.environ.get(PATH_ENV_VAR, "").strip()
    if path_override is not None:
        tries_path = expand_path(path_override)
    elif env_path:
        tries_path = expand_path(env_path)
    else:
        tries_path = _load_path(data, "path") or expand_path(DEFAULT_TRIES_PATH)
    archive_path = _load_path(data, "archive_path") or tries_path / ARCHIVE_DIRNAME
    return TryConfig(
        path=tries_path,
        archive_path=archive_path,
        hooks=load_hooks(data),
        init_actions=load_init_actions(data),
    )


def save_tries_path(tries_path: Path) -> None:
    """Persist the tries root so later runs pick it up without ``--path``."""
    config = load_config()
    config["path"] = str(tries_path)
    save_config(config)
