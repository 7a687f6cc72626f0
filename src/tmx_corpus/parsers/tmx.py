"""TMX parser.

Turns one decoded TMX document into a `TmxDocument`:

    tmx
      header (attributes only)
      body
        tu
          prop type="..."   (0..n)
          tuv xml:lang="..." (0..n)
            seg

Missing attributes and empty elements default to "", including a `tuv`
without a language. Anything that is not well-formed XML or lacks the
tmx/header/body skeleton raises TmxParseError.
"""

from __future__ import annotations
import re
from typing import Dict, List

from lxml import etree

from ..errors import TmxParseError
from ..pipeline.context import Prop, Segment, TmxDocument, TranslationUnit

XML_NS = "http://www.w3.org/XML/1998/namespace"
_XML_LANG = f"{{{XML_NS}}}lang"
_XML_DECL_RE = re.compile(r"^\s*<\?xml[^>]*\?>")


def _parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        huge_tree=True,
    )


def _local(el: etree._Element) -> str:
    return etree.QName(el).localname


def _children(el: etree._Element, name: str) -> List[etree._Element]:
    return [c for c in el if isinstance(c.tag, str) and _local(c) == name]


def _text(el: etree._Element) -> str:
    return "".join(el.itertext())


def _attr_name(key: str) -> str:
    if key.startswith(f"{{{XML_NS}}}"):
        return "xml:" + key.split("}", 1)[1]
    return key


def _parse_header(el: etree._Element) -> Dict[str, str]:
    return {_attr_name(str(k)): str(v) for k, v in el.attrib.items()}


def _parse_segment(tuv: etree._Element) -> Segment:
    lang = tuv.get(_XML_LANG)
    if lang is None:
        lang = tuv.get("lang", "")
    segs = _children(tuv, "seg")
    content = _text(segs[0]) if segs else ""
    return Segment(lang=lang, content=content)


def _parse_unit(tu: etree._Element) -> TranslationUnit:
    props = [Prop(key=p.get("type", ""), value=_text(p)) for p in _children(tu, "prop")]
    segments = [_parse_segment(tuv) for tuv in _children(tu, "tuv")]
    return TranslationUnit(props=props, segments=segments)


def parse_tmx(text: str) -> TmxDocument:
    """Deserialize a TMX string into a TmxDocument."""
    # Input is already decoded. The declaration names the original encoding
    # (UTF-16LE in DGT-TM), so drop it and hand lxml UTF-8 bytes.
    text = _XML_DECL_RE.sub("", text.lstrip("\ufeff"), count=1)
    try:
        root = etree.fromstring(text.encode("utf-8"), parser=_parser())
    except (etree.XMLSyntaxError, ValueError) as e:
        raise TmxParseError(f"Malformed TMX: {e}") from e

    if root is None or _local(root) != "tmx":
        raise TmxParseError("Root element is not <tmx>")

    headers = _children(root, "header")
    bodies = _children(root, "body")
    if not headers:
        raise TmxParseError("Missing <header>")
    if not bodies:
        raise TmxParseError("Missing <body>")

    return TmxDocument(
        header=_parse_header(headers[0]),
        body=[_parse_unit(tu) for tu in _children(bodies[0], "tu")],
    )
