"""Document parsers."""

from .tmx import parse_tmx

__all__ = ["parse_tmx"]
