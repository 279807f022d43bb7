"""Terminal.app: ``do script`` in a matching window's tab.  No focus needed."""

from __future__ import annotations

from roomdispatch.rooms.registry import Room, TransportKind
from roomdispatch.transports.base import AppleScriptTransport, TransportResult
from roomdispatch.transports.escaping import applescript_literal

_SCRIPT = """
tell application {app}
  set targetTab to missing value

  repeat with w in windows
    if name of w contains {hint} then
      set targetTab to selected tab of w
      exit repeat
    end if
  end repeat

  if targetTab is missing value then
    if (count of windows) > 0 then
      set targetTab to selected tab of first window
    else
      error "No Terminal windows open"
    end if
  end if

  do script {text} in targetTab
end tell
"sent"
"""


class TerminalAppTransport(AppleScriptTransport):
    kind = TransportKind.WINDOW_SCRIPT
    name = "terminal"

    def build_script(self, room: Room, text: str) -> str:
        return _SCRIPT.format(
            app=applescript_literal(room.target_app),
            hint=applescript_literal(room.match_hint),
            text=applescript_literal(text),
        )

    async def send(self, room: Room, text: str) -> TransportResult:
        return await self.run_script(self.build_script(room, text), room)
