"""
Tests for language code coercion, normalization and column validation.
"""

import pytest

from tmx_corpus.errors import InvalidLanguageColumnError
from tmx_corpus.langs import (
    coerce_lang_code,
    coerce_lang_codes,
    is_valid_column,
    lang_code_to_column,
    normalize_lang_code,
)


class TestCoercion:
    def test_known_codes(self):
        assert coerce_lang_codes(["en", "pl", "ga"]) == ["EN-GB", "PL-01", "GA-IE"]

    def test_case_insensitive(self):
        assert coerce_lang_code("EN") == "EN-GB"

    def test_unrecognized_code_left_intact(self):
        assert coerce_lang_code("Hello") == "Hello"
        assert coerce_lang_code("DE-DE") == "DE-DE"


class TestNormalization:
    @pytest.mark.parametrize(
        "code,expected",
        [
            ("EN-GB", "en_gb"),
            ("PL-01", "pl_01"),
            ("en_gb", "en_gb"),
            ("En--Gb", "en_gb"),
            ("pt pt", "pt_pt"),
        ],
    )
    def test_normalize(self, code, expected):
        assert normalize_lang_code(code) == expected

    @pytest.mark.parametrize("code", ["EN-GB", "PL-01", "x", "", "sr-Latn-RS", "a--b__c"])
    def test_normalize_is_idempotent(self, code):
        once = normalize_lang_code(code)
        assert normalize_lang_code(once) == once


class TestColumns:
    def test_valid_codes(self):
        assert lang_code_to_column("EN-GB") == "en_gb"
        assert lang_code_to_column("PL-01") == "pl_01"

    @pytest.mark.parametrize("code", ["", "EN", "ENG-GB", "sr-Latn-RS", "EN-GB-x", "é-ü1"])
    def test_invalid_codes_raise(self, code):
        with pytest.raises(InvalidLanguageColumnError) as exc:
            lang_code_to_column(code)
        assert exc.value.lang_code == code

    def test_is_valid_column(self):
        assert is_valid_column("de_de")
        assert not is_valid_column("de-de")
        assert not is_valid_column("de_de; DROP TABLE documents")
