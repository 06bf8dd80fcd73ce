"""ANSI color codes for terminal output.

All colors use the 256-color palette.

Usage:
    from stepflow.logging.colors import GREEN, RESET

    print(f"{GREEN}Success!{RESET}")
"""

RESET = "\033[0m"

# Status colors
GREEN = "\033[38;5;82m"  # Success
RED = "\033[38;5;196m"  # Failure
YELLOW = "\033[38;5;226m"  # Warnings, retries

# Information colors
LIGHT_BLUE = "\033[38;5;153m"  # Context dump
CYAN = "\033[38;5;51m"  # Info
MAGENTA = "\033[38;5;201m"  # Workflow component

__all__ = [
    "RESET",
    "GREEN",
    "RED",
    "YELLOW",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
]
