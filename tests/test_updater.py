"""Tests for the file-level update run."""

from __future__ import annotations

from pathlib import Path

import pytest

from rate_updater.errors import MarkerNotFoundError, MissingInputError, ParseError, SchemaError
from rate_updater.updater import UpdatePaths, run_update


@pytest.fixture
def paths(repo: Path) -> UpdatePaths:
    return UpdatePaths.from_root(repo)


def _snapshot(paths: UpdatePaths) -> dict[str, bytes | None]:
    return {
        name: path.read_bytes() if path.exists() else None
        for name, path in (("data", paths.data_file), ("host", paths.host_file))
    }


def test_run_update_writes_both_destinations(paths):
    result = run_update(paths)

    assert paths.data_file.read_bytes() == paths.source.read_bytes()
    html = paths.host_file.read_text(encoding="utf-8")
    assert '  { abbr: "CA", name: "California", rate: 13.3 },' in html
    assert 'let RATES_LAST_UPDATED = "2025-02-01";' in html
    assert "let RATES_TAX_YEAR = 2025;" in html

    assert result.table.state_count == 51
    assert result.host_changed is True
    assert result.inserted_markers == []
    assert result.paths_touched == [paths.data_file, paths.host_file]


def test_creates_data_directory(tmp_path, rate_data, host_document, write_rates):
    paths = UpdatePaths(
        source=tmp_path / "rates.json",
        data_file=tmp_path / "site" / "static" / "data" / "rates.json",
        host_file=tmp_path / "index.html",
    )
    write_rates(paths.source, rate_data)
    paths.host_file.write_text(host_document, encoding="utf-8")

    run_update(paths)
    assert paths.data_file.is_file()


def test_second_run_is_byte_identical(paths):
    run_update(paths)
    first = _snapshot(paths)

    result = run_update(paths)
    assert result.host_changed is False
    assert _snapshot(paths) == first


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.pop("year"),
        lambda d: d.pop("updated"),
        lambda d: d.update(states=d["states"][:10]),
        lambda d: d["states"][30].pop("rate"),
        lambda d: d["states"][50].update(name=""),
    ],
)
def test_invalid_input_writes_nothing(paths, rate_data, write_rates, mutate):
    mutate(rate_data)
    write_rates(paths.source, rate_data)
    before = _snapshot(paths)

    with pytest.raises(SchemaError):
        run_update(paths)
    assert _snapshot(paths) == before
    assert not paths.data_file.exists()


def test_malformed_input_writes_nothing(paths):
    paths.source.write_text("{ not json", encoding="utf-8")
    before = _snapshot(paths)
    with pytest.raises(ParseError):
        run_update(paths)
    assert _snapshot(paths) == before


def test_missing_source(paths):
    paths.source.unlink()
    with pytest.raises(MissingInputError) as exc_info:
        run_update(paths)
    assert exc_info.value.path == paths.source


def test_missing_host_document(paths):
    paths.host_file.unlink()
    with pytest.raises(MissingInputError):
        run_update(paths)
    assert not paths.data_file.exists()


def test_missing_array_marker_writes_nothing(paths):
    paths.host_file.write_text("<html><script>run();</script></html>\n", encoding="utf-8")
    with pytest.raises(MarkerNotFoundError) as exc_info:
        run_update(paths)
    assert exc_info.value.path == paths.host_file
    assert str(paths.host_file) in str(exc_info.value)
    assert not paths.data_file.exists()


def test_missing_scalar_marker_is_inserted(paths, host_document):
    paths.host_file.write_text(
        host_document.replace('  let RATES_LAST_UPDATED = "2024-01-15";\n', ""),
        encoding="utf-8",
    )
    result = run_update(paths)
    assert result.inserted_markers == ["RATES_LAST_UPDATED"]
    assert '\n];\n  let RATES_LAST_UPDATED = "2025-02-01";\n' in paths.host_file.read_text(
        encoding="utf-8"
    )


def test_without_data_file(paths):
    result = run_update(paths, write_data_file=False)
    assert result.data_file is None
    assert result.paths_touched == [paths.host_file]
    assert not paths.data_file.exists()
    assert "RATES_TAX_YEAR = 2025;" in paths.host_file.read_text(encoding="utf-8")


def test_dry_run_writes_nothing(paths):
    before = _snapshot(paths)
    result = run_update(paths, dry_run=True)
    assert result.dry_run is True
    assert result.host_changed is True
    assert _snapshot(paths) == before


def test_crlf_line_endings_preserved(paths, host_document):
    paths.host_file.write_bytes(host_document.replace("\n", "\r\n").encode("utf-8"))
    run_update(paths)
    raw = paths.host_file.read_bytes()
    assert b"  function stateRate(abbr)" in raw
    assert raw.endswith(b"</script>\r\n</body>\r\n</html>\r\n")


def test_unparseable_scalar_marker_writes_nothing(paths, host_document):
    paths.host_file.write_text(
        host_document.replace("let RATES_TAX_YEAR = 2024;", "let RATES_TAX_YEAR = '2024';"),
        encoding="utf-8",
    )
    before = _snapshot(paths)
    with pytest.raises(MarkerNotFoundError, match="could not be parsed in") as exc_info:
        run_update(paths)
    assert exc_info.value.marker == "RATES_TAX_YEAR"
    assert exc_info.value.path == paths.host_file
    assert _snapshot(paths) == before


@pytest.mark.parametrize("year", ["2025-26", 2025.0, True])
def test_non_integer_year_writes_nothing(paths, rate_data, write_rates, year):
    rate_data["year"] = year
    write_rates(paths.source, rate_data)
    before = _snapshot(paths)
    with pytest.raises(SchemaError, match="'year' must be a whole number"):
        run_update(paths)
    assert _snapshot(paths) == before
