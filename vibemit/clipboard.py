"""Clipboard support via the platform's copy command."""

import subprocess
import sys

_LINUX_COMMANDS = (
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
)


def _commands_for_platform(platform: str) -> tuple:
    if platform == "darwin":
        return (["pbcopy"],)
    if platform.startswith("linux"):
        return _LINUX_COMMANDS
    if platform.startswith("win"):
        return (["clip"],)
    return ()


def copy_to_clipboard(text: str, platform: str = sys.platform) -> bool:
    """Copy ``text`` to the clipboard; False when no tool succeeded."""
    for command in _commands_for_platform(platform):
        try:
            subprocess.run(
                command,
                input=text,
                text=True,
                capture_output=True,
                check=True,
            )
            return True
        except (subprocess.CalledProcessError, OSError):
            continue
    return False
