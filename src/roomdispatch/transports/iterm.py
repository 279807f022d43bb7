"""iTerm2: ``write text`` into a session.  No focus needed."""

from __future__ import annotations

from roomdispatch.rooms.registry import Room, TransportKind
from roomdispatch.transports.base import AppleScriptTransport, TransportResult
from roomdispatch.transports.escaping import applescript_literal

_SCRIPT = """
tell application {app}
  set targetSession to missing value

  repeat with w in windows
    repeat with t in tabs of w
      repeat with s in sessions of t
        if name of s contains {hint} then
          set targetSession to s
          exit repeat
        end if
      end repeat
      if targetSession is not missing value then exit repeat
    end repeat
    if targetSession is not missing value then exit repeat
  end repeat

  if targetSession is missing value then
    set targetSession to current session of first window
  end if

  tell targetSession
    write text {text}
  end tell
end tell
"sent"
"""


class ITermTransport(AppleScriptTransport):
    kind = TransportKind.SESSION_WRITE
    name = "iterm"

    def build_script(self, room: Room, text: str) -> str:
        return _SCRIPT.format(
            app=applescript_literal(room.target_app),
            hint=applescript_literal(room.match_hint),
            text=applescript_literal(text),
        )

    async def send(self, room: Room, text: str) -> TransportResult:
        return await self.run_script(self.build_script(room, text), room)
