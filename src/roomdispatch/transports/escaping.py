"""Per-transport text escaping.

AppleScript string literals need backslashes, quotes and line breaks escaped
so that a prompt cannot close the literal and inject script.  Raw-text
transports (kitty, wezterm, clipboard) receive text on stdin, so they only
need terminal control sequences removed.
"""

from __future__ import annotations

import re

_APPLESCRIPT_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
}

# C0 controls except tab/newline, plus DEL.  ESC is the important one.
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")


def strip_controls(text: str) -> str:
    return _CONTROL_RE.sub("", text.replace("\r\n", "\n"))


def escape_applescript(text: str) -> str:
    """Escape ``text`` for use inside a double-quoted AppleScript literal."""
    cleaned = _CONTROL_RE.sub("", text.replace("\r\n", "\n").replace("\r", "\n"))
    return "".join(_APPLESCRIPT_ESCAPES.get(ch, ch) for ch in cleaned)


def applescript_literal(text: str) -> str:
    return f'"{escape_applescript(text)}"'
