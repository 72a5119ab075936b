"""Tests for the incremental orchestrator."""

from __future__ import annotations

from pathlib import Path

import pytest

from cssjit.config import ConfigError
from cssjit.emitter import COMBINED_ARTIFACT
from cssjit.orchestrator import Orchestrator
from tests._fixtures.repo_builder import RepoBuilder

MARKER = """
namespace Demo
{
    public static partial class MonorailCSS
    {
    }
}
"""

WIDGET = """
namespace Demo
{
    public class Widget
    {
        public string First => CssClass("bg-red-200");
        public string Second => MonorailCSS.CssClass("bg-red-300");
    }
}
"""


def test_run_writes_combined_artifact(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "MonorailCSS.cs": MARKER,
            "Widget.cs": WIDGET,
            "Pages/Index.razor": '<div class="p-4"></div>\n',
        }
    )

    outcome = Orchestrator().run(str(repo_builder.path()))

    target = repo_builder.path().resolve() / "Generated" / COMBINED_ARTIFACT
    assert outcome.written == [target]
    assert outcome.class_set is not None
    assert set(outcome.class_set.classes) == {"bg-red-200", "bg-red-300", "p-4"}
    text = target.read_text(encoding="utf-8")
    assert "namespace Demo" in text
    assert "public static partial class MonorailCSS" in text


def test_second_run_reuses_cache_and_skips_unchanged_files(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"MonorailCSS.cs": MARKER, "Widget.cs": WIDGET})
    orchestrator = Orchestrator()

    first = orchestrator.run(str(repo_builder.path()))
    second = orchestrator.run(str(repo_builder.path()))

    assert first.computed > 0
    assert second.computed == 0
    assert second.reused == first.computed
    assert second.written == []
    assert second.artifacts == first.artifacts


def test_changed_unit_is_rescanned(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"MonorailCSS.cs": MARKER, "Widget.cs": WIDGET})
    orchestrator = Orchestrator()
    orchestrator.run(str(repo_builder.path()))

    repo_builder.write({"Widget.cs": WIDGET.replace("bg-red-300", "bg-blue-500")})
    outcome = orchestrator.run(str(repo_builder.path()))

    assert outcome.class_set is not None
    assert set(outcome.class_set.classes) == {"bg-red-200", "bg-blue-500"}
    assert outcome.reused > 0
    assert len(outcome.written) == 1


def test_no_marker_writes_nothing_and_removes_stale_output(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"MonorailCSS.cs": MARKER, "Widget.cs": WIDGET})
    orchestrator = Orchestrator()
    orchestrator.run(str(repo_builder.path()))
    generated = repo_builder.path().resolve() / "Generated" / COMBINED_ARTIFACT
    assert generated.exists()

    (repo_builder.path() / "MonorailCSS.cs").unlink()
    outcome = orchestrator.run(str(repo_builder.path()))

    assert outcome.marker is None
    assert outcome.artifacts == []
    assert outcome.removed == [generated]
    assert not generated.exists()


def test_switching_modes_replaces_artifacts(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"MonorailCSS.cs": MARKER, "Widget.cs": WIDGET})
    orchestrator = Orchestrator()

    outcome = orchestrator.run(str(repo_builder.path()), mode="categories")

    names = sorted(path.name for path in outcome.written)
    assert names == sorted(
        [
            "monorail-css-attributes-jit.g.cs",
            "monorail-css-markup-jit.g.cs",
            "monorail-css-helpers-jit.g.cs",
            "monorail-css-files-jit.g.cs",
            COMBINED_ARTIFACT,
        ]
    )

    back = orchestrator.run(str(repo_builder.path()), mode="combined")

    assert len(back.removed) == 4
    remaining = sorted(path.name for path in (repo_builder.path() / "Generated").iterdir())
    assert remaining == [COMBINED_ARTIFACT]


def test_dry_run_writes_nothing(repo_builder: RepoBuilder, tmp_path: Path) -> None:
    repo_builder.write({"MonorailCSS.cs": MARKER, "Widget.cs": WIDGET})

    outcome = Orchestrator().run(str(repo_builder.path()), output_dir=tmp_path / "out", dry_run=True)

    assert outcome.dry_run is True
    assert outcome.artifacts
    assert outcome.written == []
    assert not (tmp_path / "out").exists()


def test_dry_run_leaves_no_cache_in_project(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"MonorailCSS.cs": MARKER, "Widget.cs": WIDGET})

    Orchestrator().run(str(repo_builder.path()), dry_run=True)

    assert not (repo_builder.path() / ".cssjit").exists()
    assert not (repo_builder.path() / "Generated").exists()


def test_collect_leaves_no_cache_in_project(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"Widget.cs": WIDGET})

    assert Orchestrator().collect(str(repo_builder.path())) == ("bg-red-200", "bg-red-300")
    assert not (repo_builder.path() / ".cssjit").exists()


def test_package_upgrade_invalidates_cached_results(
    repo_builder: RepoBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    repo_builder.write({"MonorailCSS.cs": MARKER, "Widget.cs": WIDGET})
    orchestrator = Orchestrator()
    first = orchestrator.run(str(repo_builder.path()))

    monkeypatch.setattr("cssjit.orchestrator.__version__", "999.0.0")
    second = orchestrator.run(str(repo_builder.path()))

    assert second.reused == 0
    assert second.computed == first.computed
    assert second.class_set is not None
    assert set(second.class_set.classes) == {"bg-red-200", "bg-red-300"}


def test_generated_sources_are_not_rescanned(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "MonorailCSS.cs": MARKER,
            "Generated/monorail-css-jit.g.cs": 'class X { string s = CssClass("from-generated"); }\n',
        }
    )

    classes = Orchestrator().collect(str(repo_builder.path()))

    assert "from-generated" not in classes


def test_collect_ignores_marker_and_honours_options(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "Widget.cs": WIDGET,
            "Views/Home.cshtml": '<div class="mx-auto"></div>\n',
            "Pages/Index.razor": '<div class="p-4"></div>\n',
        }
    )

    classes = Orchestrator().collect(
        str(repo_builder.path()), options={"file_extension_filter": ".cshtml"}
    )

    assert classes == ("bg-red-200", "bg-red-300", "mx-auto")


def test_bad_pattern_in_config_raises(repo_builder: RepoBuilder) -> None:
    repo_builder.write({".cssjit.yml": "pattern: 'class=\"(.*)\"'\n", "Widget.cs": WIDGET})

    with pytest.raises(ConfigError):
        Orchestrator().run(str(repo_builder.path()))
