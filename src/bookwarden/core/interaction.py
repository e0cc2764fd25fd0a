# ABOUTME: User interaction seam used during imports and metadata conflict resolution.
# ABOUTME: The CLI supplies a click-based prompter; batch runs use NonInteractive defaults.

import logging
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class UserInteraction(Protocol):
    """Questions the engine may need to ask a human."""

    def accept(self, question: str, default: bool = False) -> bool: ...

    def choose(self, field_name: str, local: str, remote: str) -> str: ...

    def edit(self, field_name: str, current: str) -> str: ...


class NonInteractive:
    """Answers every question without asking.

    Confirmations return their configured default, conflicts keep the local
    value unless it is blank, and edits leave the value unchanged.
    """

    def accept(self, question: str, default: bool = False) -> bool:
        logger.info("%s -> %s (non-interactive)", question, "yes" if default else "no")
        return default

    def choose(self, field_name: str, local: str, remote: str) -> str:
        return local or remote

    def edit(self, field_name: str, current: str) -> str:
        return current
