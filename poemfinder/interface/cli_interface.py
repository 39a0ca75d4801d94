# poemfinder/interface/cli_interface.py

import asyncio
import logging
import sys
from typing import Any, Callable, Dict, List, Optional, TextIO

from poemfinder.core.orchestrator import SearchOrchestrator
from .base_interface import BaseInterface

# Reverse video, used in place of <mark> in the terminal
HIGHLIGHT_OPEN = "\033[7m"
HIGHLIGHT_CLOSE = "\033[0m"

HELP_TEXT = """Commands:
  author <name>       set author filter (empty clears); searches automatically
  title <text>        set title filter (empty clears); searches automatically
  exact on|off        toggle exact (case-literal) matching
  search              search now with the current filters
  random [n]          fetch n random poems
  word <word>         set the word to count and highlight (empty clears)
  count               show the word count for every result
  best                select the result that uses the word most
  top [pool] [k]      rank a random pool by the word and keep the top k
  show <i>            select result i and print it highlighted
  toggle <i>          expand/collapse result i
  copy <i>            print result i as plain text
  list                list current results
  summary             show the poem and author counts
  help                show this help
  quit                exit"""


class LoggingInterceptor:
    """Routes log records to stderr while the prompt owns stdout."""

    def __init__(self, log_level: str = "WARNING"):
        self.log_level = getattr(logging, log_level.upper(), logging.WARNING)
        self.original_handlers = []
        self._setup_interception()

    def _setup_interception(self):
        """Setup logging interception."""
        root_logger = logging.getLogger()

        # Store original handlers
        for handler in root_logger.handlers[:]:
            self.original_handlers.append(handler)
            root_logger.removeHandler(handler)

        # Add our custom handler
        custom_handler = logging.StreamHandler(sys.stderr)
        custom_handler.setLevel(self.log_level)
        custom_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        root_logger.addHandler(custom_handler)

    def restore_logging(self):
        """Restore original logging configuration."""
        root_logger = logging.getLogger()

        # Remove our custom handler
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        # Restore original handlers
        for handler in self.original_handlers:
            root_logger.addHandler(handler)
        self.original_handlers = []


class CLIInterface(BaseInterface):
    """Interactive prompt for searching and analysing poems."""

    PROMPT = "poemfinder> "

    def __init__(self, orchestrator: SearchOrchestrator, config: Optional[Dict[str, Any]] = None,
                 input_func: Callable[[str], str] = input, output: Optional[TextIO] = None):
        super().__init__(orchestrator, config)
        self.input_func = input_func
        self.output = output or sys.stdout
        self.completed = False
        self.log_interceptor = None

        self._commands = {
            'author': self._cmd_author,
            'title': self._cmd_title,
            'exact': self._cmd_exact,
            'search': self._cmd_search,
            'random': self._cmd_random,
            'word': self._cmd_word,
            'count': self._cmd_count,
            'best': self._cmd_best,
            'top': self._cmd_top,
            'show': self._cmd_show,
            'toggle': self._cmd_toggle,
            'copy': self._cmd_copy,
            'list': self._cmd_list,
            'summary': self._cmd_summary,
            'help': self._cmd_help,
        }

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _print(self, text: str = "") -> None:
        self.output.write(f"{text}\n")

    def render_results(self) -> None:
        state = self.orchestrator.state
        if state.error is not None:
            self._print(f"Error: {state.error}")
        self._print(self.orchestrator.result_summary)

        word = state.word.strip()
        for i, poem in enumerate(state.poems):
            marker = "*" if state.selected_index == i else " "
            line = f"{marker}[{i}] {poem.title} — {poem.author}"
            if poem.lines:
                line += f" ({len(poem.lines)} lines)"
            if word:
                line += f" [{word}: {self.orchestrator.count_in_poem(poem)}]"
            self._print(line)

        if state.best_match is not None:
            if state.best_match.is_match:
                self._print(f"Best match for '{state.best_match.word}': "
                            f"[{state.best_match.poem_index}] with {state.best_match.count}")
            else:
                self._print(f"No poem contains '{state.best_match.word}'")

        selected = self.orchestrator.selected_poem
        if selected is not None:
            self._print()
            self._print(self.orchestrator.highlight(selected, open_marker=HIGHLIGHT_OPEN,
                                                    close_marker=HIGHLIGHT_CLOSE, escape=False))

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _parse_index(self, args: List[str]) -> Optional[int]:
        if not args:
            self._print("An index is required")
            return None
        try:
            index = int(args[0])
        except ValueError:
            self._print(f"Not an index: {args[0]}")
            return None
        if not 0 <= index < len(self.orchestrator.state.poems):
            self._print(f"No result {index}")
            return None
        return index

    def _parse_ints(self, args: List[str]) -> Optional[List[int]]:
        try:
            values = [int(a) for a in args]
        except ValueError:
            self._print(f"Expected numbers, got: {' '.join(args)}")
            return None
        if any(v < 1 for v in values):
            self._print("Numbers must be positive")
            return None
        return values

    async def _update_criteria(self, **changes) -> None:
        current = self.orchestrator.state.criteria
        values = {'author': current.author, 'title': current.title, 'exact': current.exact}
        values.update(changes)
        self.orchestrator.update_criteria(**values)
        if not self.orchestrator.can_search:
            self._print("Filters cleared")
            return

        # Let the debounced search settle before rendering
        await self.orchestrator.debouncer.settle()
        self.render_results()

    async def _cmd_author(self, args: List[str]) -> None:
        await self._update_criteria(author=" ".join(args) or None)

    async def _cmd_title(self, args: List[str]) -> None:
        await self._update_criteria(title=" ".join(args) or None)

    async def _cmd_exact(self, args: List[str]) -> None:
        if not args or args[0].lower() not in ("on", "off"):
            self._print("Usage: exact on|off")
            return
        await self._update_criteria(exact=args[0].lower() == "on")

    async def _cmd_search(self, args: List[str]) -> None:
        await self.orchestrator.search()
        self.render_results()

    async def _cmd_random(self, args: List[str]) -> None:
        values = self._parse_ints(args[:1])
        if values is None:
            return
        await self.orchestrator.random(values[0] if values else None)
        self.render_results()

    async def _cmd_word(self, args: List[str]) -> None:
        self.orchestrator.set_word(" ".join(args))
        word = self.orchestrator.state.word
        self._print(f"Word set to '{word}'" if word else "Word cleared")

    async def _cmd_count(self, args: List[str]) -> None:
        word = self.orchestrator.state.word.strip()
        if not word:
            self._print("Set a word first")
            return
        for i, poem in enumerate(self.orchestrator.state.poems):
            self._print(f"[{i}] {poem.title}: {self.orchestrator.count_in_poem(poem)}")

    async def _cmd_best(self, args: List[str]) -> None:
        if self.orchestrator.find_best_in_current_results() is None:
            self._print("Set a word first")
            return
        self.render_results()

    async def _cmd_top(self, args: List[str]) -> None:
        values = self._parse_ints(args[:2])
        if values is None:
            return
        if not self.orchestrator.state.word.strip():
            self._print("Set a word first")
            return
        pool_size = values[0] if len(values) > 0 else None
        top_k = values[1] if len(values) > 1 else None
        await self.orchestrator.top_by_word(pool_size, top_k)
        self.render_results()

    async def _cmd_show(self, args: List[str]) -> None:
        index = self._parse_index(args)
        if index is None:
            return
        self.orchestrator.state.select(index)
        self.render_results()

    async def _cmd_toggle(self, args: List[str]) -> None:
        index = self._parse_index(args)
        if index is None:
            return
        self.orchestrator.toggle_select(index)
        self.render_results()

    async def _cmd_copy(self, args: List[str]) -> None:
        index = self._parse_index(args)
        if index is None:
            return
        self._print(self.orchestrator.format_poem(index))

    async def _cmd_list(self, args: List[str]) -> None:
        self.render_results()

    async def _cmd_summary(self, args: List[str]) -> None:
        self._print(self.orchestrator.result_summary)

    async def _cmd_help(self, args: List[str]) -> None:
        self._print(HELP_TEXT)

    async def handle_command(self, line: str) -> bool:
        """
        Execute one command line.

        Returns:
            False when the user asked to quit, True otherwise
        """
        parts = line.strip().split()
        if not parts:
            return True

        name, args = parts[0].lower(), parts[1:]
        if name in ("quit", "exit"):
            self.completed = True
            return False

        command = self._commands.get(name)
        if command is None:
            self._print(f"Unknown command: {name} (try 'help')")
            return True

        await command(args)
        return True

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def _setup_logging_interception(self):
        """Setup logging interception for CLI output."""
        log_level = self.config.get("log_level", "WARNING")
        self.log_interceptor = LoggingInterceptor(log_level)

    def _restore_logging(self):
        """Restore original logging configuration."""
        if self.log_interceptor:
            self.log_interceptor.restore_logging()
            self.log_interceptor = None

    async def run_async(self) -> None:
        loop = asyncio.get_running_loop()
        self._print("poemfinder: search PoetryDB. Type 'help' for commands.")
        while not self.completed:
            try:
                line = await loop.run_in_executor(None, self.input_func, self.PROMPT)
            except EOFError:
                self.completed = True
                break
            if not await self.handle_command(line):
                break

    def run(self) -> None:
        """Run the CLI interface."""
        try:
            self._setup_logging_interception()
            asyncio.run(self.run_async())
        except KeyboardInterrupt:
            self._print("\nInterrupted by user")
        finally:
            self._restore_logging()
            self.cleanup()

    def is_completed(self) -> bool:
        """Check if the interface has completed."""
        return self.completed
