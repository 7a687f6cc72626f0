"""Core pipeline data model.

A TMX document is parsed once into `TmxDocument`; its translation units then
flow one by one through the language filter into a writer.

Example unit as found in DGT-TM:

    <tu>
        <prop type="Txt::Doc. No.">22019A0315(01)</prop>
        <tuv lang="EN-GB"><seg>Agreement</seg></tuv>
        <tuv lang="DE-DE"><seg>ÜBERSETZUNG</seg></tuv>
    </tu>
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional

# `prop` type naming the EU legislation a unit comes from.
DOC_NAME_PROP = "Txt::Doc. No."


@dataclass(frozen=True)
class Prop:
    key: str = ""
    value: str = ""


@dataclass(frozen=True)
class Segment:
    """One language realization of a translation unit."""
    lang: str = ""
    content: str = ""


@dataclass(frozen=True)
class TranslationUnit:
    props: List[Prop] = field(default_factory=list)
    segments: List[Segment] = field(default_factory=list)

    def doc_name(self) -> Optional[str]:
        """Name of the document the unit belongs to (first matching prop)."""
        for prop in self.props:
            if prop.key == DOC_NAME_PROP:
                return prop.value
        return None


@dataclass(frozen=True)
class TmxDocument:
    # attributes of <header>
    header: Dict[str, str] = field(default_factory=dict)
    body: List[TranslationUnit] = field(default_factory=list)


@dataclass
class Decision:
    accepted: bool
    stage: str
    reason_code: str = ""
    reason_detail: str = ""
