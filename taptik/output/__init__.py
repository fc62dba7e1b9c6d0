# Taptik Output Module
# Rich console output

from taptik.output.console import Console, create_console

__all__ = [
    "Console",
    "create_console",
]
