"""Persistent rule list injected into every generation request."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from .git import get_git_dir

logger = logging.getLogger(__name__)

RULES_FILE_NAME = "vibemit.json"
GLOBAL_CONFIG_FILE_NAME = "config.json"


def global_config_dir() -> Path:
    override = os.environ.get("VIBEMIT_CONFIG_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "vibemit"


def rules_path(cwd: Optional[Path] = None) -> Path:
    """Return the rules file location.

    Inside a Git repository the rules live next to the repository metadata
    (``.git/vibemit.json``) so they stay per-project and untracked;
    elsewhere the global config file is used.
    """
    git_dir = get_git_dir(cwd)
    if git_dir:
        path = Path(git_dir)
        if not path.is_absolute() and cwd is not None:
            path = Path(cwd) / path
        return path / RULES_FILE_NAME
    return global_config_dir() / GLOBAL_CONFIG_FILE_NAME


def _load(path: Path) -> List[str]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return []
    except (OSError, ValueError) as exc:
        logger.debug("rules.load ignoring unreadable %s: %s", path, exc)
        return []
    rules = data.get("rules") if isinstance(data, dict) else None
    if not isinstance(rules, list):
        return []
    return [rule for rule in rules if isinstance(rule, str)]


def _save(path: Path, rules: List[str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"rules": rules}, indent=2) + "\n", encoding="utf-8")


def get_rules(cwd: Optional[Path] = None) -> List[str]:
    return _load(rules_path(cwd))


def add_rule(rule: str, cwd: Optional[Path] = None) -> Path:
    """Append ``rule`` and persist; returns the file written."""
    path = rules_path(cwd)
    rules = _load(path)
    rules.append(rule)
    _save(path, rules)
    return path


def clear_rules(cwd: Optional[Path] = None) -> None:
    """Delete the rules file. A missing file is not an error."""
    path = rules_path(cwd)
    try:
        path.unlink()
    except FileNotFoundError:
        pass
