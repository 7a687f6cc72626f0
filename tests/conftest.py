"""
Shared fixtures: synthetic DGT-TM corpora built at test time.

TMX files are written the way DGT ships them: UTF-16LE with a BOM, zipped.
"""

import codecs
import os
import zipfile
from html import escape
from typing import Dict, List, Optional, Sequence, Tuple

import pytest
import sqlalchemy as sa

DOC_PROP = "Txt::Doc. No."

# (document name, number of translation units)
DGT_DOCUMENTS = [
    ("22019D0557", 20),
    ("22019D0558", 22),
    ("22019D0559", 21),
    ("22019D0391", 25),
    ("22019D0437", 143),
    ("22019D0438", 212),
    ("22019D0556", 19),
]

# this document has no Polish segments: 462 - 22 = 440 units carry en and pl
DOC_WITHOUT_POLISH = "22019D0558"


def tu_xml(doc_name: Optional[str], segments: Sequence[Tuple[Optional[str], str]], props: Sequence[Tuple[str, str]] = ()) -> str:
    parts = ["<tu>"]
    for key, value in props:
        parts.append(f'<prop type="{escape(key)}">{escape(value, quote=False)}</prop>')
    if doc_name is not None:
        parts.append(f'<prop type="{escape(DOC_PROP)}">{escape(doc_name, quote=False)}</prop>')
    for lang, text in segments:
        attr = f' lang="{lang}"' if lang is not None else ""
        parts.append(f"<tuv{attr}><seg>{escape(text, quote=False)}</seg></tuv>")
    parts.append("</tu>")
    return "".join(parts)


def tmx_xml(units: Sequence[str], header_attrs: Optional[Dict[str, str]] = None) -> str:
    header_attrs = header_attrs or {"creationtool": "test", "srclang": "EN-GB", "datatype": "plaintext"}
    attrs = " ".join(f'{k}="{escape(v)}"' for k, v in header_attrs.items())
    return (
        '<?xml version="1.0" encoding="UTF-16LE"?>\n'
        '<tmx version="1.4">\n'
        f"<header {attrs}></header>\n"
        "<body>\n" + "\n".join(units) + "\n</body>\n</tmx>\n"
    )


def encode_tmx(text: str) -> bytes:
    return codecs.BOM_UTF16_LE + text.encode("utf-16-le")


def segment_text(doc_name: str, i: int, lang: str) -> str:
    return f"{lang} sentence {i} of {doc_name}: it's \"quoted\" & <escaped>"


def dgt_units(doc_name: str, size: int) -> List[str]:
    units = []
    for i in range(size):
        segments = [("EN-GB", segment_text(doc_name, i, "EN-GB"))]
        if doc_name != DOC_WITHOUT_POLISH:
            segments.append(("PL-01", segment_text(doc_name, i, "PL-01")))
        segments.append(("DE-DE", segment_text(doc_name, i, "DE-DE")))
        if i % 10 == 0:
            segments.append(("FR-FR", segment_text(doc_name, i, "FR-FR")))
        units.append(tu_xml(doc_name, segments, props=[("Txt::Note", "n/a")]))
    return units


def write_zip(path: str, members: Dict[str, bytes]) -> str:
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in members.items():
            zf.writestr(name, data)
    return path


@pytest.fixture
def dgt_corpus(tmp_path):
    """Directory with 3 ZIP archives holding the 7 DGT documents plus noise."""
    corpus = tmp_path / "zipped"
    corpus.mkdir()
    docs = {name: encode_tmx(tmx_xml(dgt_units(name, size))) for name, size in DGT_DOCUMENTS}
    names = [name for name, _ in DGT_DOCUMENTS]

    write_zip(str(corpus / "Vol_2019_1.zip"), {
        **{f"{n}.tmx": docs[n] for n in names[:3]},
        "readme.txt": b"not a document",
    })
    write_zip(str(corpus / "Vol_2019_2.zip"), {
        **{f"{n}.tmx": docs[n] for n in names[3:5]},
        "broken.tmx": encode_tmx("<tmx><header/><body><tu>"),
    })
    write_zip(str(corpus / "Vol_2019_3.zip"), {f"{n}.tmx": docs[n] for n in names[5:]})
    (corpus / "notes.txt").write_text("not a zip archive", encoding="utf-8")
    return str(corpus)


@pytest.fixture
def engine():
    """In-memory SQLite engine."""
    eng = sa.create_engine("sqlite://")
    yield eng
    eng.dispose()


def query_scalar(engine, query: str, **params):
    with engine.connect() as conn:
        return conn.execute(sa.text(query), params).scalar()


def query_all(engine, query: str, **params):
    with engine.connect() as conn:
        return conn.execute(sa.text(query), params).all()


def sqlite_engine(path: str):
    return sa.create_engine(f"sqlite:///{os.path.abspath(path)}")
