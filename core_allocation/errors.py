"""Errors raised while planning and writing machinefiles.

All errors derive from click exceptions so the command line reports them as
``Error: <message>`` with a non-zero exit status.
"""

from typing import Optional

import click


class ConfigurationError(click.UsageError):
    """A required input is missing or invalid.

    Raised inside a running command, the usage of that command is shown too.
    """

    def __init__(self, message: str, ctx: Optional[click.Context] = None) -> None:
        super().__init__(message, ctx or click.get_current_context(silent=True))


class AllocationError(click.ClickException):
    """Base class for failures detected after the inputs were accepted."""


class CapacityError(AllocationError):
    """The requested cores do not fit (or do not fill) the node pool."""


class OverwriteConflict(AllocationError):
    """An output file already exists and overwriting was not allowed."""


class SourceUnavailable(AllocationError):
    """The node pool source is missing or unreadable."""


class AllocationExhausted(AllocationError):
    """The assignment would read past the end of the node pool."""

    def __init__(self, run_index: int, node_index: int, total_nodes: int) -> None:
        self.run_index = run_index
        self.node_index = node_index
        self.total_nodes = total_nodes
        super().__init__(
            f"Node pool exhausted: run {run_index} needs node {node_index} "
            f"but only {total_nodes} node(s) are available"
        )
