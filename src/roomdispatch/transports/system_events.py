"""System Events keystrokes into the frontmost app.

This is the only transport that steals focus, so callers must run it through
the :class:`~roomdispatch.transports.queue.SerializationQueue`.  Long text
goes through the clipboard and a paste shortcut instead of being typed.
"""

from __future__ import annotations

from roomdispatch.errors import truncate
from roomdispatch.rooms.registry import Room, TransportKind
from roomdispatch.shell import CommandRunner, run_command
from roomdispatch.transports.base import AppleScriptTransport, TransportResult
from roomdispatch.transports.escaping import applescript_literal, strip_controls

_TYPE_SCRIPT = """
tell application {app}
  activate
end tell

delay {delay}

tell application "System Events"
  tell process {process}
    set frontmost to true
    delay 0.2
    keystroke {text}
    delay 0.2
    keystroke return
  end tell
end tell
"typed"
"""

_PASTE_SCRIPT = """
tell application {app}
  activate
end tell

delay {delay}

tell application "System Events"
  tell process {process}
    set frontmost to true
    delay 0.2
    keystroke "v" using command down
    delay 0.3
    keystroke return
  end tell
end tell
"pasted"
"""


class SystemEventsTransport(AppleScriptTransport):
    kind = TransportKind.KEYSTROKE
    name = "system-events"

    def __init__(
        self,
        *,
        runner: CommandRunner = run_command,
        timeout: float = 30.0,
        paste_threshold: int = 100,
        focus_delay: float = 0.3,
    ) -> None:
        super().__init__(runner=runner, timeout=timeout)
        self.paste_threshold = paste_threshold
        self.focus_delay = focus_delay

    def build_type_script(self, room: Room, text: str) -> str:
        return _TYPE_SCRIPT.format(
            app=applescript_literal(room.target_app),
            process=applescript_literal(room.process_name),
            delay=self.focus_delay,
            text=applescript_literal(text),
        )

    def build_paste_script(self, room: Room) -> str:
        return _PASTE_SCRIPT.format(
            app=applescript_literal(room.target_app),
            process=applescript_literal(room.process_name),
            delay=self.focus_delay,
        )

    async def send(self, room: Room, text: str) -> TransportResult:
        if len(text) > self.paste_threshold:
            return await self._paste(room, text)
        return await self.run_script(self.build_type_script(room, text), room)

    async def _paste(self, room: Room, text: str) -> TransportResult:
        copied = await self._runner(["pbcopy"], input_text=strip_controls(text), timeout=self._timeout)
        if not copied.ok:
            return TransportResult(
                success=False,
                message=f"Clipboard copy failed [{room.id}]: {truncate(copied.stderr)}",
                room=room.id,
                transport=self.name,
            )
        result = await self.run_script(self.build_paste_script(room), room)
        result.data["pasted"] = True
        return result
