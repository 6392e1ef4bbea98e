"""CLI tests for search, status, load and embed commands."""

from pathlib import Path

from typer.testing import CliRunner

import restaurant_finder.main as main_module
from conftest import FakeStore
from restaurant_finder.errors import StoreUnavailable
from restaurant_finder.search import SearchStrategySelector
from restaurant_finder.storage import DuckDBRestaurantStore


def test_literal_search_prints_matching_restaurants(db_path: str, monkeypatch) -> None:
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    runner = CliRunner()

    result = runner.invoke(
        main_module.app,
        ["search", "Karachi", "--mode", "literal", "--db-path", db_path],
    )

    assert result.exit_code == 0
    assert "Karachi Grill" in result.output
    assert "Spice Garden" not in result.output
    assert "text_match" in result.output


def test_semantic_search_without_api_key_uses_store_match(db_path: str, monkeypatch) -> None:
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    runner = CliRunner()

    result = runner.invoke(
        main_module.app, ["search", "spice garden", "--db-path", db_path]
    )

    assert result.exit_code == 0
    assert "Spice Garden" in result.output
    assert "server_semantic" in result.output
    assert "100%" in result.output


def test_search_with_no_matches_reports_no_results(db_path: str, monkeypatch) -> None:
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    runner = CliRunner()

    result = runner.invoke(
        main_module.app,
        ["search", "Quetta", "--mode", "literal", "--db-path", db_path],
    )

    assert result.exit_code == 0
    assert "No restaurants found" in result.output


def test_empty_query_is_rejected(db_path: str) -> None:
    runner = CliRunner()

    result = runner.invoke(main_module.app, ["search", "   ", "--db-path", db_path])

    assert result.exit_code == 2
    assert "Search Query Required" in result.output


def test_search_failure_shows_query_and_reason(db_path: str, monkeypatch) -> None:
    failing_store = FakeStore(
        errors={
            "match_text": StoreUnavailable("text search unavailable"),
            "scan_attributes": StoreUnavailable("table missing"),
        }
    )
    monkeypatch.setattr(
        main_module,
        "build_selector",
        lambda store, settings: SearchStrategySelector(failing_store, settings=settings),
    )
    runner = CliRunner()

    result = runner.invoke(
        main_module.app,
        ["search", "nihari", "--mode", "literal", "--db-path", db_path],
    )

    assert result.exit_code == 1
    assert "Search Error" in result.output
    assert "nihari" in result.output


def test_search_missing_database(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        main_module.app,
        ["search", "karahi", "--db-path", str(tmp_path / "missing.duckdb")],
    )

    assert result.exit_code == 1
    assert "No restaurant database" in result.output


def test_load_and_status(tmp_path: Path, restaurants_file: Path) -> None:
    db_path = str(tmp_path / "loaded.duckdb")
    runner = CliRunner()

    loaded = runner.invoke(
        main_module.app, ["load", str(restaurants_file), "--db-path", db_path]
    )
    status = runner.invoke(main_module.app, ["status", "--db-path", db_path])

    assert loaded.exit_code == 0
    assert "Loaded 4 restaurants" in loaded.output
    assert status.exit_code == 0
    assert "Connected" in status.output
    assert "4 restaurants" in status.output


def test_load_rejects_invalid_file(tmp_path: Path) -> None:
    bad_file = tmp_path / "bad.json"
    bad_file.write_text('[{"name": "no id"}]')
    runner = CliRunner()

    result = runner.invoke(
        main_module.app,
        ["load", str(bad_file), "--db-path", str(tmp_path / "bad.duckdb")],
    )

    assert result.exit_code == 1
    assert "Invalid restaurant file" in result.output


def test_status_without_database(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        main_module.app, ["status", "--db-path", str(tmp_path / "none.duckdb")]
    )

    assert result.exit_code == 1
    assert "Not Connected" in result.output


class _FakeEmbeddingProvider:
    def __init__(self, **kwargs) -> None:
        self.texts: list[str] = []

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        self.texts.extend(texts)
        return [[0.5, 0.5, 0.0, 0.0] for _ in texts]


def test_embed_backfills_missing_embeddings(db_path: str, monkeypatch) -> None:
    monkeypatch.setattr(main_module, "EmbeddingProvider", _FakeEmbeddingProvider)
    runner = CliRunner()

    result = runner.invoke(main_module.app, ["embed", "--db-path", db_path])

    assert result.exit_code == 0
    assert "Stored 2 embeddings" in result.output
    store = DuckDBRestaurantStore(db_path)
    try:
        assert store.list_missing_embeddings() == []
    finally:
        store.close()


def test_embed_without_api_key_fails(db_path: str, monkeypatch) -> None:
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    runner = CliRunner()

    result = runner.invoke(main_module.app, ["embed", "--db-path", db_path])

    assert result.exit_code == 1
    assert "GOOGLE_API_KEY" in result.output


def test_load_into_non_duckdb_file_fails_cleanly(tmp_path: Path, restaurants_file: Path) -> None:
    not_a_db = tmp_path / "notadb.duckdb"
    not_a_db.write_text("garbage")
    runner = CliRunner()

    result = runner.invoke(
        main_module.app, ["load", str(restaurants_file), "--db-path", str(not_a_db)]
    )

    assert result.exit_code == 1
    assert "Load failed" in result.output


def test_embed_into_non_duckdb_file_fails_cleanly(tmp_path: Path, monkeypatch) -> None:
    not_a_db = tmp_path / "notadb.duckdb"
    not_a_db.write_text("garbage")
    monkeypatch.setattr(main_module, "EmbeddingProvider", _FakeEmbeddingProvider)
    runner = CliRunner()

    result = runner.invoke(main_module.app, ["embed", "--db-path", str(not_a_db)])

    assert result.exit_code == 1
    assert "Embedding failed" in result.output


def test_search_rejects_non_positive_limit(db_path: str) -> None:
    runner = CliRunner()

    result = runner.invoke(
        main_module.app,
        ["search", "Lahore", "--mode", "literal", "--limit", "-1", "--db-path", db_path],
    )

    assert result.exit_code == 2
    assert "Search Error" not in result.output
