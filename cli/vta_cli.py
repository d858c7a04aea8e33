"""Main CLI loop for interactive chat."""

import logging
import sys
from typing import TextIO

from .client import ChatAPIClient, ChatAPIError
from .config import CLIConfig
from .formatter import ResponseFormatter

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("exit", "quit", "q")
RATING_COMMANDS = {"/good": "helpful", "/bad": "unhelpful"}


class VtaCLI:
    """Interactive terminal client for the teaching assistant."""

    def __init__(
        self,
        config: CLIConfig,
        input_stream: TextIO = sys.stdin,
        output_stream: TextIO = sys.stdout,
        client: ChatAPIClient | None = None,
    ):
        self.config = config
        self.input_stream = input_stream
        self.formatter = ResponseFormatter(output_stream)
        self.client = client or ChatAPIClient(config)
        self.session_id: str | None = None
        self.last_message_id: str | None = None

    async def run(self) -> None:
        """Run the interactive CLI loop."""
        try:
            self._print_welcome()
            self.formatter.show_history(await self.client.history())
            while True:
                try:
                    line = self._get_user_input()
                    if not line.strip():
                        continue

                    command = line.strip().lower()
                    if command in EXIT_COMMANDS:
                        self.formatter.show_notice("Goodbye!")
                        break
                    if command in RATING_COMMANDS:
                        await self._rate(RATING_COMMANDS[command])
                        continue

                    await self._send(line)

                except KeyboardInterrupt:
                    self.formatter.show_notice(
                        "\n\nInterrupted. Use 'exit' or 'quit' to exit."
                    )
                except EOFError:
                    self.formatter.show_notice("\nGoodbye!")
                    break
        finally:
            await self.client.close()

    async def _send(self, message: str) -> None:
        try:
            data = await self.client.chat(message, self.session_id)
        except ChatAPIError as e:
            self.formatter.show_error(str(e))
            return

        self.session_id = data.get("sessionId") or self.session_id
        self.last_message_id = data.get("messageId")
        self.formatter.show_reply(data.get("reply"))

    async def _rate(self, rating: str) -> None:
        if not self.last_message_id:
            self.formatter.show_notice("Nothing to rate yet.")
            return
        try:
            await self.client.rate(self.last_message_id, rating)
        except ChatAPIError as e:
            self.formatter.show_error(str(e))
            return
        self.last_message_id = None
        self.formatter.show_notice("Thanks for your feedback\n")

    def _get_user_input(self) -> str:
        self.formatter.show_notice("> ")
        line = self.input_stream.readline()
        if not line:
            raise EOFError
        return line.rstrip("\n\r")

    def _print_welcome(self) -> None:
        self.formatter.show_notice("VTA CLI - Cybersecurity Teaching Assistant")
        self.formatter.show_notice(f"Connected to: {self.config.base_url}")
        self.formatter.show_notice(
            "Type your question and press Enter. /good or /bad rates the last "
            "answer, 'exit' quits.\n"
        )


async def main(
    host: str = "localhost",
    port: int = 8000,
    debug: bool = False,
) -> None:
    """Main entry point for the CLI."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    config = CLIConfig(host=host, port=port)
    cli = VtaCLI(config)
    await cli.run()
