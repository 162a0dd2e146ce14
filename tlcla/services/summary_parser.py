"""Background log summary parsing service.

This module parses one combat log file off the caller's thread. All logic is
pure Python with no UI dependencies - results and messages are delegated via
callbacks, which are invoked on the background thread.
"""

import threading
import time
from pathlib import Path
from typing import Callable, Optional

from ..config import ParserSettings
from ..models import ParsedLogSummary
from ..parser import LogParser
from ..utils import parse_and_summarize_file


class LogSummaryParserService:
    """Service for parsing a combat log file in a background thread.

    Exactly one parse is in flight per service instance. A parse cannot be
    interrupted mid-pass; cancelling only discards its result. Separate
    instances share no state and can run in parallel.
    """

    def __init__(self, settings: Optional[ParserSettings] = None) -> None:
        """Initialize the parser service.

        Args:
            settings: Parser settings forwarded to every parse
        """
        self.settings = settings
        self.is_parsing = False
        self.parse_thread: Optional[threading.Thread] = None
        self.last_summary: Optional[ParsedLogSummary] = None
        self._generation = 0
        self._lock = threading.Lock()

    def start_parsing(
        self,
        file_path: str,
        on_log: Callable[[str, str], None],
        on_complete: Callable[[ParsedLogSummary], None],
        on_error: Optional[Callable[[str], None]] = None,
        on_progress: Optional[Callable[[int], None]] = None,
    ) -> bool:
        """Start parsing a log file in a background thread.

        Args:
            file_path: Path to the combat log
            on_log: Callback for logging messages (message, msg_type)
            on_complete: Callback receiving the finished summary
            on_error: Optional callback receiving a retryable error message
            on_progress: Optional callback called with the number of records processed

        Returns:
            True if parsing started, False if already in progress
        """
        with self._lock:
            if self.is_parsing:
                on_log("Parsing already in progress", "warning")
                return False
            self.is_parsing = True
            self._generation += 1
            generation = self._generation

        self.parse_thread = threading.Thread(
            target=self._parse_thread,
            args=(generation, file_path, on_log, on_complete, on_error, on_progress),
            daemon=True
        )
        self.parse_thread.start()
        return True

    def cancel_parsing(self, timeout: float = 2.0) -> None:
        """Discard the result of the running parse.

        Args:
            timeout: Maximum seconds to wait for the thread to finish
        """
        with self._lock:
            if not self.is_parsing:
                return
            self._generation += 1
            self.is_parsing = False

        if self.parse_thread and self.parse_thread.is_alive():
            self.parse_thread.join(timeout=timeout)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the running parse thread finishes.

        Args:
            timeout: Maximum seconds to wait, None to wait indefinitely

        Returns:
            True if no parse thread is alive afterwards
        """
        if self.parse_thread is None:
            return True
        self.parse_thread.join(timeout=timeout)
        return not self.parse_thread.is_alive()

    def is_parsing_active(self) -> bool:
        """Check if parsing is currently active.

        Returns:
            True if parsing is in progress
        """
        return self.is_parsing

    def _is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def _parse_thread(
        self,
        generation: int,
        file_path: str,
        on_log: Callable[[str, str], None],
        on_complete: Callable[[ParsedLogSummary], None],
        on_error: Optional[Callable[[str], None]],
        on_progress: Optional[Callable[[int], None]],
    ) -> None:
        """Background thread function parsing one log file."""
        name = Path(file_path).name
        started = time.perf_counter()
        try:
            on_log(f"Parsing {name}...", "info")
            result = parse_and_summarize_file(
                file_path,
                parser=LogParser(),
                settings=self.settings,
                progress_callback=on_progress,
            )

            if not self._is_current(generation):
                on_log(f"Parsing of {name} cancelled, result discarded", "info")
                return

            if result['success']:
                summary = result['summary']
                self.last_summary = summary
                elapsed = time.perf_counter() - started
                if summary.is_empty:
                    on_log(f"No damage events found in {name}", "warning")
                on_log(f"Completed: {summary.total_events} damage event(s) from {name} in {elapsed:.2f}s", "info")
                on_complete(summary)
            else:
                on_log(f"Error in {name}: {result['error']}", "error")
                if on_error:
                    on_error(result['error'])
        except Exception as e:
            on_log(f"Error during parsing: {e}", "error")
            if on_error:
                on_error(str(e))
        finally:
            with self._lock:
                if generation == self._generation:
                    self.is_parsing = False
