"""Rendering of chat messages in the terminal."""

from typing import TextIO

BOT_PREFIX = "Assistant"
USER_PREFIX = "You"
FALLBACK_REPLY = "I'm not sure how to respond to that."


class ResponseFormatter:
    """Writes history, replies and notices to an output stream."""

    def __init__(self, output: TextIO):
        self.output = output

    def show_history(self, entries: list[dict]) -> None:
        if not entries:
            return
        self._print("--- Previous messages ---\n")
        for entry in entries:
            self.show_message(entry.get("sender", "bot"), entry.get("text", ""))
        self._print("-------------------------\n\n")

    def show_message(self, sender: str, text: str) -> None:
        prefix = USER_PREFIX if sender == "user" else BOT_PREFIX
        self._print(f"{prefix}: {text}\n")

    def show_reply(self, reply: str | None) -> None:
        text = reply or FALLBACK_REPLY
        self._print(f"\n{BOT_PREFIX}: {text}\n")
        self._print("(rate with /good or /bad)\n\n")

    def show_error(self, message: str) -> None:
        self._print(f"\n❌ Error: {message}\n\n")

    def show_notice(self, message: str) -> None:
        self._print(f"{message}\n")

    def _print(self, text: str) -> None:
        self.output.write(text)
        self.output.flush()
