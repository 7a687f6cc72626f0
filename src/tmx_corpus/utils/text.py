"""Text decoding for archive entries.

DGT-TM ships TMX files as UTF-16LE with a byte order mark. Decoding is strict:
malformed sequences fail the entry instead of being replaced.
"""

from __future__ import annotations
import codecs

from ..errors import EntryDecodeError

DEFAULT_ENCODING = "utf-16-le"

_BOMS = {
    "utf-16-le": codecs.BOM_UTF16_LE,
    "utf-16-be": codecs.BOM_UTF16_BE,
    "utf-8": codecs.BOM_UTF8,
}


def decode_entry(data: bytes, encoding: str = DEFAULT_ENCODING) -> str:
    """Decode entry bytes, dropping a leading BOM that matches `encoding`."""
    encoding = codecs.lookup(encoding).name
    bom = _BOMS.get(encoding)
    if bom and data.startswith(bom):
        data = data[len(bom):]
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as e:
        raise EntryDecodeError(f"Error decoding input as {encoding}: {e}") from e
