"""Console output formatting utilities for kitepipe."""

from __future__ import annotations

import sys
from typing import List, Optional

from ..model import Step, WaitStep


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_plan_started(
        self,
        pipeline: str,
        source: str,
        step_count: int,
    ) -> None:
        """Print plan header information."""
        print("\nPLAN")
        print(f"Pipeline: {pipeline}")
        print(f"Source: {source}")
        print(f"Steps: {step_count}")

    def print_wait(self, wait: WaitStep) -> None:
        """Print a wait line between two batches."""
        suffix = " (continue on failure)" if wait.continue_on_failure else ""
        print(f"{wait}{suffix}")

    def print_batch(
        self,
        index: int,
        steps: List[Step],
        show_deps: bool = False,
    ) -> None:
        """
        Print one batch of steps that may run concurrently.

        Args:
            index: 1-based batch number
            steps: Steps in the batch, in resolved order
            show_deps: If True, list each step's dependencies
        """
        print(f"BATCH {index}:")
        for step in steps:
            marker = " [always]" if step.always else ""
            print(f"  {step}{marker}")
            if show_deps and step.dependencies:
                deps = ", ".join(str(d) for d in step.dependencies)
                print(f"    needs: {deps}")

    def print_summary(self, steps: int, waits: int, batches: int) -> None:
        """Print final plan summary."""
        print("\n" + "=" * 40)
        print("SUMMARY")
        print("=" * 40)
        print(f"  Steps: {steps}")
        print(f"  Waits: {waits}")
        print(f"  Batches: {batches}")

    def print_check_ok(self, pipeline: str, steps: int) -> None:
        """Print successful check message."""
        print(f"OK: {pipeline} ({steps} steps, no cycles)")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
