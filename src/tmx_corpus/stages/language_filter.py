"""Language inclusion predicate.

Users may restrict the output to a set of languages:
- UNLIMITED: every unit, every language
- ANY_OF: units with at least one requested language
- ALL_OF: units with each requested language

Codes are compared after `normalize_lang_code`, so `EN-GB`, `en-gb` and
`en_gb` are the same language. An empty requested set restricts nothing:
ALL_OF(()) is vacuously true and ANY_OF(()) excludes no unit.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Optional

from ..langs import coerce_lang_codes, normalize_lang_code
from ..pipeline.context import Decision, TranslationUnit
from .base import Stage


class LangMode(str, Enum):
    UNLIMITED = "unlimited"
    ANY_OF = "any_of"
    ALL_OF = "all_of"


@dataclass(frozen=True)
class RequestedLangs:
    mode: LangMode = LangMode.UNLIMITED
    langs: FrozenSet[str] = frozenset()
    normalized: FrozenSet[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "langs", frozenset(self.langs))
        object.__setattr__(
            self, "normalized", frozenset(normalize_lang_code(l) for l in self.langs)
        )

    @classmethod
    def unlimited(cls) -> "RequestedLangs":
        return cls(LangMode.UNLIMITED)

    @classmethod
    def any_of(cls, langs: Iterable[str]) -> "RequestedLangs":
        return cls(LangMode.ANY_OF, frozenset(langs))

    @classmethod
    def all_of(cls, langs: Iterable[str]) -> "RequestedLangs":
        return cls(LangMode.ALL_OF, frozenset(langs))

    @classmethod
    def from_cli(cls, langs: Optional[Iterable[str]], require_each: bool = False) -> "RequestedLangs":
        """Build the filter from user input, coercing `en` => `EN-GB` etc."""
        if langs is None:
            return cls.unlimited()
        coerced = coerce_lang_codes(langs)
        return cls.all_of(coerced) if require_each else cls.any_of(coerced)

    @property
    def restricts_columns(self) -> bool:
        return self.mode != LangMode.UNLIMITED and bool(self.normalized)

    def allows(self, lang: str) -> bool:
        """Whether text in `lang` should be written to the output."""
        if not self.restricts_columns:
            return True
        return normalize_lang_code(lang) in self.normalized


def is_included(unit: TranslationUnit, requested: RequestedLangs) -> bool:
    """Decide whether a translation unit passes the language filter."""
    if requested.mode == LangMode.UNLIMITED or not requested.normalized:
        return True
    present = {normalize_lang_code(seg.lang) for seg in unit.segments}
    if requested.mode == LangMode.ALL_OF:
        return requested.normalized <= present
    return not requested.normalized.isdisjoint(present)


class LanguageFilter(Stage):
    name = "language_filter"

    def __init__(self, requested: RequestedLangs):
        self.requested = requested

    def apply(self, unit: TranslationUnit) -> Decision:
        if is_included(unit, self.requested):
            return Decision(True, self.name)
        return Decision(
            False,
            self.name,
            reason_code="LANG_MISSING",
            reason_detail=f"{self.requested.mode.value}: {sorted(self.requested.langs)}",
        )
