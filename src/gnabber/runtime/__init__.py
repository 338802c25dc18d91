"""Runtime for the chat state machine: the program loop and effect executor."""

from .executor import EffectExecutor, local_now
from .program import Program

__all__ = [
    "EffectExecutor",
    "Program",
    "local_now",
]
