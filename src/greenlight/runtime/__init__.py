"""Process adapters for the external assistant and the terminal multiplexer."""

from greenlight.runtime.assistant import (
    DANGEROUS_FLAG,
    AdapterError,
    AssistantAdapter,
    AssistantNotFoundError,
    Command,
    EmptyPromptError,
    StartFailureError,
    filter_dangerous_flags,
)
from greenlight.runtime.mux import (
    Mux,
    MuxAddWindowFailedError,
    MuxAttachFailedError,
    MuxCommandError,
    MuxCreateFailedError,
    MuxNotFoundError,
)
from greenlight.runtime.process import (
    CommandResult,
    CommandRunner,
    Lookup,
    ProcessHandle,
    SubprocessCommandRunner,
)

__all__ = [
    "DANGEROUS_FLAG",
    "AdapterError",
    "AssistantAdapter",
    "AssistantNotFoundError",
    "Command",
    "CommandResult",
    "CommandRunner",
    "EmptyPromptError",
    "Lookup",
    "Mux",
    "MuxAddWindowFailedError",
    "MuxAttachFailedError",
    "MuxCommandError",
    "MuxCreateFailedError",
    "MuxNotFoundError",
    "ProcessHandle",
    "StartFailureError",
    "SubprocessCommandRunner",
    "filter_dangerous_flags",
]
