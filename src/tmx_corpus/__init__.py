"""tmx_corpus

Ingest the DGT translation memory (ZIP archives of TMX documents) into a
relational store whose schema grows one column per language.

Public API surface:
- tmx_corpus.cli.main : CLI entrypoint
- tmx_corpus.pipeline.build.build / ingest : run the pipeline
- tmx_corpus.parsers.tmx.parse_tmx : TMX text -> TmxDocument
- tmx_corpus.stages.language_filter : language inclusion predicate
- tmx_corpus.writers : database and SQL-script writers
"""
__all__ = ["__version__"]
__version__ = "0.3.0"
