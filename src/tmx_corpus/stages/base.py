"""Stage plugin interface.

Stages must:
- accept a TranslationUnit
- return a Decision (accept/reject + reason)
- never mutate the unit (units are shared with the writer)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from ..pipeline.context import Decision, TranslationUnit


class Stage(ABC):
    name: str = "stage"

    @abstractmethod
    def apply(self, unit: TranslationUnit) -> Decision:
        ...
