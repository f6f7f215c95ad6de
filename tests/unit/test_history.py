"""Unit tests for the history store."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
import time_machine

from benchwatch.core.exceptions import StorageError
from benchwatch.core.ordering import ToolType
from benchwatch.core.types import DataDocument, RepositoryContext
from benchwatch.history import (
    SCRIPT_PREFIX,
    append,
    best_of_history,
    deserialize,
    empty_document,
    from_script,
    load,
    previous_run,
    serialize,
    to_script,
)

if TYPE_CHECKING:
    from pathlib import Path

    from tests.unit.conftest import RunFactory


# ============================================================================
# Append Tests
# ============================================================================


class TestAppend:
    """Tests for append()."""

    def test_first_run_creates_suite(self, make_run: RunFactory, repo: RepositoryContext) -> None:
        """Appending to an empty document creates the suite with one run."""
        document = empty_document()
        run = make_run("c1")

        prior = append(document, "Benchmark", run, None, repo)

        assert prior == []
        assert document.entries == {"Benchmark": [run]}

    def test_different_commit_is_prior(self, make_run: RunFactory, repo: RepositoryContext) -> None:
        """A run of another commit is returned as prior run."""
        document = empty_document()
        run_a = make_run("c1")
        run_c = make_run("c2")

        append(document, "Benchmark", run_a, None, repo)
        prior = append(document, "Benchmark", run_c, None, repo)

        assert prior == [run_a]
        assert document.entries["Benchmark"] == [run_a, run_c]

    def test_same_commit_is_not_prior(self, make_run: RunFactory, repo: RepositoryContext) -> None:
        """Re-running a commit does not make the earlier run a prior run."""
        document = empty_document()
        run_a = make_run("c1", {"bench_a": 100.0})
        run_b = make_run("c1", {"bench_a": 110.0})

        append(document, "Benchmark", run_a, None, repo)
        prior = append(document, "Benchmark", run_b, None, repo)

        assert prior == []
        assert document.entries["Benchmark"] == [run_a, run_b]

    def test_rerun_keeps_previous_commit_baseline(self, make_run: RunFactory, repo: RepositoryContext) -> None:
        """The baseline of a re-run stays the last run of another commit."""
        document = empty_document()
        run_1 = make_run("c1")
        run_2 = make_run("c2")
        run_2_again = make_run("c2")

        append(document, "Benchmark", run_1, None, repo)
        append(document, "Benchmark", run_2, None, repo)
        prior = append(document, "Benchmark", run_2_again, None, repo)

        assert previous_run(prior) == run_1

    def test_retention_keeps_most_recent(self, make_run: RunFactory, repo: RepositoryContext) -> None:
        """Appending N+1 runs with max_items N keeps the most recent N in order."""
        document = empty_document()
        runs = [make_run(f"c{i}") for i in range(6)]

        for run in runs:
            append(document, "Benchmark", run, 5, repo)

        assert document.entries["Benchmark"] == runs[1:]

    def test_prior_runs_computed_before_trimming(self, make_run: RunFactory, repo: RepositoryContext) -> None:
        """Prior runs reflect the history before the new run was appended."""
        document = empty_document()
        run_1 = make_run("c1")
        run_2 = make_run("c2")

        append(document, "Benchmark", run_1, 1, repo)
        prior = append(document, "Benchmark", run_2, 1, repo)

        assert prior == [run_1]
        assert document.entries["Benchmark"] == [run_2]

    def test_unbounded_retention(self, make_run: RunFactory, repo: RepositoryContext) -> None:
        """Without max_items nothing is dropped."""
        document = empty_document()
        for i in range(20):
            append(document, "Benchmark", make_run(f"c{i}"), None, repo)

        assert len(document.entries["Benchmark"]) == 20

    def test_other_suites_untouched(self, make_run: RunFactory, repo: RepositoryContext) -> None:
        """Appending to one suite leaves other suites as they were."""
        document = empty_document()
        other = make_run("c0")
        append(document, "Other", other, None, repo)

        prior = append(document, "Benchmark", make_run("c1"), None, repo)

        assert prior == []
        assert document.entries["Other"] == [other]

    @time_machine.travel("2024-01-15 10:30:00+00:00", tick=False)
    def test_updates_metadata(self, make_run: RunFactory, repo: RepositoryContext) -> None:
        """Append records the write time and the repository URL."""
        document = empty_document()

        append(document, "Benchmark", make_run("c1"), None, repo)

        assert document.last_update == 1705314600000
        assert document.repo_url == "https://github.com/octo/speedy"


# ============================================================================
# Baseline Tests
# ============================================================================


class TestBaselines:
    """Tests for previous_run() and best_of_history()."""

    def test_previous_run_empty(self) -> None:
        assert previous_run([]) is None

    def test_previous_run_is_last(self, make_run: RunFactory) -> None:
        runs = [make_run("c1"), make_run("c2")]
        assert previous_run(runs) == runs[-1]

    def test_best_smaller_is_better(self, make_run: RunFactory) -> None:
        """The smallest value wins for timing tools."""
        prior = [
            make_run("c1", {"a": 120.0, "b": 10.0}),
            make_run("c2", {"a": 90.0, "b": 12.0}),
            make_run("c3", {"a": 100.0}),
        ]
        current = make_run("c4", {"a": 95.0, "b": 11.0})

        best = best_of_history(current, prior)

        assert best["a"].value == 90.0
        assert best["b"].value == 10.0

    def test_best_bigger_is_better(self, make_run: RunFactory) -> None:
        """The largest value wins for throughput tools."""
        prior = [
            make_run("c1", {"ops": 1000.0}, tool=ToolType.PYTEST),
            make_run("c2", {"ops": 1500.0}, tool=ToolType.PYTEST),
            make_run("c3", {"ops": 1200.0}, tool=ToolType.PYTEST),
        ]
        current = make_run("c4", {"ops": 1100.0}, tool=ToolType.PYTEST)

        assert best_of_history(current, prior)["ops"].value == 1500.0

    def test_best_skips_new_metrics(self, make_run: RunFactory) -> None:
        """Benchmarks never recorded before have no best value."""
        prior = [make_run("c1", {"a": 100.0})]
        current = make_run("c2", {"a": 100.0, "new": 5.0})

        best = best_of_history(current, prior)

        assert "new" not in best

    def test_best_tie_keeps_earliest(self, make_run: RunFactory) -> None:
        """On equal values the earliest run's result is kept."""
        first = make_run("c1", {"a": 100.0})
        prior = [first, make_run("c2", {"a": 100.0})]

        best = best_of_history(make_run("c3", {"a": 90.0}), prior)

        assert best["a"] is first.benches[0]


# ============================================================================
# Serialization Tests
# ============================================================================


class TestSerialization:
    """Tests for serialize(), deserialize() and the script form."""

    def test_round_trip(self, make_run: RunFactory, repo: RepositoryContext) -> None:
        """A document produced by append survives a round trip unchanged."""
        document = empty_document()
        for i in range(3):
            append(document, "Benchmark", make_run(f"c{i}", {"a": 100.0 + i, "b": 0.5}), None, repo)
        append(document, "Other", make_run("c9", tool=ToolType.PYTEST), None, repo)

        assert deserialize(serialize(document)) == document

    def test_uses_on_disk_field_names(self, make_run: RunFactory, repo: RepositoryContext) -> None:
        """Serialized documents use camelCase root keys."""
        document = empty_document()
        append(document, "Benchmark", make_run("c1"), None, repo)

        data = json.loads(serialize(document))

        assert set(data) == {"lastUpdate", "repoUrl", "entries"}
        run = data["entries"]["Benchmark"][0]
        assert run["tool"] == "cargo"
        assert run["commit"]["id"] == "c1"
        assert run["benches"][0] == {"name": "bench_a", "value": 100.0, "unit": "ns/iter"}

    def test_optional_range_kept(self) -> None:
        """Ranges and unknown commit fields survive a round trip."""
        text = json.dumps(
            {
                "lastUpdate": 1,
                "repoUrl": "https://github.com/octo/speedy",
                "entries": {
                    "Benchmark": [
                        {
                            "commit": {"id": "c1", "message": "m", "distinct": True},
                            "tool": "go",
                            "benches": [{"name": "x", "value": 3, "unit": "ns/op", "range": "+/- 1"}],
                            "date": 2,
                        }
                    ]
                },
            }
        )

        document = deserialize(text)
        reloaded = json.loads(serialize(document))

        run = reloaded["entries"]["Benchmark"][0]
        assert run["benches"][0]["range"] == "+/- 1"
        assert run["commit"]["distinct"] is True
        assert '"value": 3,' in serialize(document)

    def test_script_prefix(self, make_run: RunFactory, repo: RepositoryContext) -> None:
        """The script form assigns the document to a global variable."""
        document = empty_document()
        append(document, "Benchmark", make_run("c1"), None, repo)

        script = to_script(document)

        assert script.startswith("window.BENCHMARK_DATA = {")
        assert from_script(script) == document

    def test_from_script_requires_prefix(self) -> None:
        with pytest.raises(ValueError, match="does not start with"):
            from_script('{"lastUpdate": 0, "repoUrl": "", "entries": {}}')

    def test_deserialize_invalid(self) -> None:
        with pytest.raises(ValueError):
            deserialize("not json")


# ============================================================================
# Load Tests
# ============================================================================


class TestLoad:
    """Tests for load()."""

    def test_missing_file_returns_empty(self, tmp_path: Path) -> None:
        """A missing file is the first-run state."""
        document = load(tmp_path / "missing.json")

        assert document == DataDocument(last_update=0, repo_url="", entries={})

    def test_malformed_file_returns_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "data.json"
        path.write_text("{broken")

        assert load(path) == empty_document()

    def test_invalid_structure_raises(self, tmp_path: Path) -> None:
        """Valid JSON that is not a history document is never replaced."""
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"entries": {"Benchmark": [{"tool": "cargo"}]}}))

        with pytest.raises(StorageError, match="is not a valid benchmark history document"):
            load(path)

    def test_unknown_tool_in_other_suite_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "data.js"
        data = {
            "lastUpdate": 1,
            "repoUrl": "https://github.com/octo/speedy",
            "entries": {
                "Other": [{"commit": {"id": "c0"}, "tool": "jmh", "benches": [], "date": 1}],
            },
        }
        path.write_text(SCRIPT_PREFIX + json.dumps(data))

        with pytest.raises(StorageError, match="entries.Other"):
            load(path, script=True)

    def test_load_json(self, tmp_path: Path, make_run: RunFactory, repo: RepositoryContext) -> None:
        document = empty_document()
        append(document, "Benchmark", make_run("c1"), None, repo)
        path = tmp_path / "data.json"
        path.write_text(serialize(document))

        assert load(path) == document

    def test_load_script(self, tmp_path: Path, make_run: RunFactory, repo: RepositoryContext) -> None:
        document = empty_document()
        append(document, "Benchmark", make_run("c1"), None, repo)
        path = tmp_path / "data.js"
        path.write_text(to_script(document))

        assert load(path, script=True) == document

    def test_script_without_prefix_returns_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "data.js"
        path.write_text(serialize(empty_document()).replace("{", "{ ", 1))

        assert load(path, script=True) == empty_document()

    def test_prefix_constant(self) -> None:
        assert SCRIPT_PREFIX == "window.BENCHMARK_DATA = "
