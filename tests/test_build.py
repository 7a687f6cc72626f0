"""
End-to-end tests for the ingestion pipeline.
"""

import json
import os

import pytest

from conftest import (
    DGT_DOCUMENTS,
    DOC_WITHOUT_POLISH,
    encode_tmx,
    query_all,
    query_scalar,
    segment_text,
    sqlite_engine,
    tmx_xml,
    tu_xml,
    write_zip,
)
from tmx_corpus.config import load_config
from tmx_corpus.errors import ConfigError, MissingDocumentIdentityError, OutputExistsError
from tmx_corpus.pipeline.build import build, ingest
from tmx_corpus.sources.zip_archives import ZipArchiveSource
from tmx_corpus.stages.language_filter import RequestedLangs
from tmx_corpus.writers.database import DatabaseWriter
from tmx_corpus.writers.registry import list_writers, make_writer, register_writer

TOTAL_UNITS = sum(size for _, size in DGT_DOCUMENTS)


def run_ingest(corpus, engine, requested=None, batch_size=20_000):
    requested = requested or RequestedLangs.unlimited()
    with DatabaseWriter(engine, requested, batch_size=batch_size) as writer:
        stats = ingest(ZipArchiveSource(corpus), writer, requested, progress=False)
    return stats


def make_cfg(corpus, output_path, tmp_path, **overrides):
    cfg = load_config()
    cfg["input"]["dir"] = corpus
    cfg["output"]["path"] = str(output_path)
    cfg["run"]["log_dir"] = str(tmp_path / "logs")
    cfg["run"]["run_id"] = "test_run"
    for section, values in overrides.items():
        cfg[section].update(values)
    return cfg


class TestIngest:
    """Test the orchestrator against the synthetic DGT corpus."""

    def test_unrestricted_corpus(self, dgt_corpus, engine):
        stats = run_ingest(dgt_corpus, engine)

        assert TOTAL_UNITS == 462
        assert stats.entries == 8
        assert stats.documents == 7
        assert stats.skipped_entries == 1
        assert stats.units_seen == 462
        assert stats.units_accepted == 462
        assert query_scalar(engine, "select count(*) from translation_units") == 462
        assert query_scalar(engine, "select count(*) from documents") == 7

    def test_units_per_document(self, dgt_corpus, engine):
        run_ingest(dgt_corpus, engine)
        for name, expected in DGT_DOCUMENTS:
            count = query_scalar(
                engine,
                "select count(*) from translation_units tu "
                "join documents d on tu.document_id = d.id where d.name = :name",
                name=name,
            )
            assert count == expected, name

    def test_sequence_numbers_are_gapless(self, dgt_corpus, engine):
        run_ingest(dgt_corpus, engine)
        for name, size in DGT_DOCUMENTS:
            rows = query_all(
                engine,
                "select tu.sequential_number from translation_units tu "
                "join documents d on tu.document_id = d.id where d.name = :name order by tu.id",
                name=name,
            )
            assert [r[0] for r in rows] == list(range(size))

    def test_text_round_trips(self, dgt_corpus, engine):
        run_ingest(dgt_corpus, engine)
        rows = query_all(
            engine,
            "select d.name, tu.sequential_number, tu.en_gb from translation_units tu "
            "join documents d on tu.document_id = d.id",
        )
        assert len(rows) == 462
        for name, seq, text in rows:
            assert text == segment_text(name, seq, "EN-GB")

    def test_all_of_en_pl(self, dgt_corpus, engine):
        requested = RequestedLangs.from_cli(["en", "pl"], require_each=True)
        stats = run_ingest(dgt_corpus, engine, requested)

        assert stats.units_accepted == 440
        assert stats.units_rejected == 22
        assert query_scalar(engine, "select count(*) from translation_units") == 440
        assert query_scalar(engine, "select count(en_gb) from translation_units") == 440
        assert query_scalar(engine, "select count(pl_01) from translation_units") == 440
        assert query_scalar(
            engine, "select count(*) from documents where name = :n", n=DOC_WITHOUT_POLISH
        ) == 0

    def test_requested_languages_limit_columns(self, dgt_corpus, engine):
        requested = RequestedLangs.from_cli(["en", "pl"], require_each=True)
        with DatabaseWriter(engine, requested) as writer:
            ingest(ZipArchiveSource(dgt_corpus), writer, requested, progress=False)
            assert set(writer.language_columns) == {"en_gb", "pl_01"}

    def test_any_of(self, dgt_corpus, engine):
        requested = RequestedLangs.from_cli(["pl", "fr"])
        stats = run_ingest(dgt_corpus, engine, requested)

        # every unit outside DOC_WITHOUT_POLISH has Polish; inside it, every 10th has French
        assert stats.units_accepted == 440 + 3
        assert query_scalar(
            engine, "select count(*) from translation_units where pl_01 is null and fr_fr is null"
        ) == 0

    @pytest.mark.parametrize("batch_size", [1, 7, 100, 461, 462, 463])
    def test_batch_size_does_not_change_results(self, dgt_corpus, engine, batch_size):
        run_ingest(dgt_corpus, engine, batch_size=batch_size)
        assert query_scalar(engine, "select count(*) from translation_units") == 462
        assert query_scalar(engine, "select count(distinct document_id) from translation_units") == 7

    def test_unit_without_document_name_aborts(self, tmp_path, engine):
        corpus = tmp_path / "zipped"
        corpus.mkdir()
        text = tmx_xml([tu_xml("D1", [("EN-GB", "ok")]), tu_xml(None, [("EN-GB", "orphan")])])
        write_zip(str(corpus / "a.zip"), {"a.tmx": encode_tmx(text)})

        with pytest.raises(MissingDocumentIdentityError) as exc:
            run_ingest(str(corpus), engine)
        assert exc.value.details["sequence_number"] == 1

    def test_unnamed_unit_rejected_by_filter_is_ignored(self, tmp_path, engine):
        corpus = tmp_path / "zipped"
        corpus.mkdir()
        text = tmx_xml([tu_xml("D1", [("EN-GB", "ok")]), tu_xml(None, [("DE-DE", "orphan")])])
        write_zip(str(corpus / "a.zip"), {"a.tmx": encode_tmx(text)})

        stats = run_ingest(str(corpus), engine, RequestedLangs.from_cli(["en"]))
        assert stats.units_accepted == 1

    def test_undecodable_entry_is_skipped(self, tmp_path, engine):
        corpus = tmp_path / "zipped"
        corpus.mkdir()
        good = encode_tmx(tmx_xml([tu_xml("D1", [("EN-GB", "ok")])]))
        write_zip(str(corpus / "a.zip"), {"odd.tmx": b"\x00\x01\x02", "good.tmx": good})

        stats = run_ingest(str(corpus), engine)
        assert stats.skipped_entries == 1
        assert stats.units_accepted == 1


class TestBuild:
    """Test config-driven runs."""

    def test_build_sqlite(self, dgt_corpus, tmp_path):
        output = tmp_path / "out" / "dgt.sqlite"
        output.parent.mkdir()
        cfg = make_cfg(dgt_corpus, output, tmp_path, output={"batch_size": 50})

        stats = build(cfg, progress=False)

        assert stats.units_accepted == 462
        engine = sqlite_engine(str(output))
        assert query_scalar(engine, "select count(*) from translation_units") == 462
        engine.dispose()

        manifest_file = tmp_path / "logs" / "manifests" / "test_run.json"
        manifest = json.loads(manifest_file.read_text(encoding="utf-8"))
        assert manifest["stats"]["units_accepted"] == 462
        assert set(manifest["language_columns"]) == {"en_gb", "pl_01", "de_de", "fr_fr"}

    def test_build_sql_script(self, dgt_corpus, tmp_path):
        output = tmp_path / "dgt.sql"
        cfg = make_cfg(
            dgt_corpus, output, tmp_path,
            output={"format": "sql"},
            langs={"include": ["en", "pl"], "require_each": True},
        )
        stats = build(cfg, progress=False)

        assert stats.units_accepted == 440
        script = output.read_text(encoding="utf-8")
        assert "ADD COLUMN en_gb TEXT" in script
        assert "de_de" not in script

    def test_existing_output_fails_before_any_table_is_created(self, dgt_corpus, tmp_path):
        output = tmp_path / "dgt.sqlite"
        output.write_bytes(b"")
        cfg = make_cfg(dgt_corpus, output, tmp_path)

        with pytest.raises(OutputExistsError):
            build(cfg, progress=False)

        assert output.read_bytes() == b""
        assert not os.path.exists(tmp_path / "logs" / "manifests" / "test_run.json")

    def test_missing_input_dir(self, tmp_path):
        cfg = make_cfg(str(tmp_path / "nope"), tmp_path / "out.sqlite", tmp_path)
        with pytest.raises(ConfigError):
            build(cfg, progress=False)
        assert not (tmp_path / "out.sqlite").exists()


class TestWriterRegistry:
    """Test output format selection."""

    def test_builtin_formats(self):
        assert list_writers()[:2] == ["sqlite", "sql"]

    def test_unknown_format(self, tmp_path):
        with pytest.raises(KeyError):
            make_writer("parquet", str(tmp_path / "out"))

    def test_duplicate_registration(self):
        with pytest.raises(ValueError):
            register_writer("sqlite", lambda path, langs, batch_size: None)

    def test_default_batch_sizes(self, tmp_path):
        with make_writer("sql", str(tmp_path / "out.sql")) as writer:
            assert writer.batch_size == 20_000
            assert writer.requested_langs == RequestedLangs.unlimited()
