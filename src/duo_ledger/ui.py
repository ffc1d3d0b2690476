"""Interactive chat loop for driving the dispatcher from a terminal."""

import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from .categories import CATEGORIES
from .chat import ChatDispatcher, ChatReply
from .models import ChatMessage

logger = logging.getLogger(__name__)

COMMANDS = (
    "/start",
    "/help",
    "/g",
    "/pago",
    "/month",
    "/summary",
    "/balance",
    "/year",
    "/find",
    "/last",
    "/edit",
    "/del",
    "/csv",
)


class CommandCompleter(Completer):
    """Completes command names, and category names inside brackets."""

    def __init__(
        self,
        commands: Iterable[str] = COMMANDS,
        categories: Iterable[str] = CATEGORIES,
    ):
        """Initialize the completer with available commands and categories."""
        self.commands = list(commands)
        self.categories = list(categories)

    def get_completions(self, document: Document, complete_event: Any):
        """Get prefix-matched completions for the word being typed."""
        text = document.text_before_cursor

        if " " not in text:
            for command in self.commands:
                if command.startswith(text):
                    yield Completion(text=command, start_position=-len(text))
            return

        word = text.rsplit(" ", 1)[-1]
        if word.startswith("["):
            prefix = word[1:].lower()
            for category in self.categories:
                if category.startswith(prefix):
                    yield Completion(
                        text=f"[{category}]",
                        start_position=-len(word),
                        display=category,
                    )


def run_chat_loop(
    dispatcher: ChatDispatcher,
    make_message: Callable[[str], ChatMessage],
    output: Callable[[str], None] = print,
    export_dir: Path | None = None,
) -> None:
    """
    Read lines from the terminal and print the dispatcher's replies.

    CSV attachments are written to ``export_dir`` (current directory by
    default). Ctrl+C or Ctrl+D ends the loop.
    """
    session: PromptSession[str] = PromptSession(completer=CommandCompleter())
    export_dir = export_dir or Path.cwd()

    output("Type /help for commands, Ctrl+D to quit.\n")
    while True:
        try:
            line = session.prompt("> ", complete_while_typing=True)
        except (KeyboardInterrupt, EOFError):
            output("Bye!")
            return

        if not line.strip():
            continue

        reply = dispatcher.handle(make_message(line))
        output(reply.text)
        if reply.document is not None:
            output(f"Saved {save_attachment(reply, export_dir)}")
        output("")


def save_attachment(reply: ChatReply, export_dir: Path) -> Path:
    """Write a reply's document to disk and return its path."""
    path = export_dir / (reply.filename or "export.csv")
    path.write_text(reply.document or "", encoding="utf-8")
    logger.info(f"Wrote attachment to {path}")
    return path
