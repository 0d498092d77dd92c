"""Smoke tests for the CLI."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from quire.cli import app


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch):
    """Run from an empty directory with no config env vars."""
    for key in (
        "QUIRE_CONTENT_DIR",
        "QUIRE_CONTENT_TYPE",
        "QUIRE_MODE",
        "QUIRE_TAG_REGISTRY",
        "QUIRE_MARKDOWN_EXTENSIONS",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """A content directory with two posts."""
    directory = tmp_path / "posts"
    directory.mkdir()
    (directory / "post-a.mdx").write_text(
        "---\ntitle: Post A\ndate: 2021-05-01\ntags: [api]\n---\nHello **A**.\n",
        encoding="utf-8",
    )
    (directory / "post-b.mdx").write_text(
        "---\ntitle: Post B\ndate: 2022-01-10\n---\nHello B.\n",
        encoding="utf-8",
    )
    return directory


class TestCLI:
    def test_main_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "list" in result.output
        assert "show" in result.output

    def test_main_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "quire" in result.output


class TestListCommand:
    def test_table(self, runner: CliRunner, content_dir: Path) -> None:
        result = runner.invoke(app, ["list", str(content_dir)])
        assert result.exit_code == 0
        assert "post-a" in result.output
        assert "post-b" in result.output
        assert result.output.index("post-b") < result.output.index("post-a")

    def test_json_slim(self, runner: CliRunner, content_dir: Path) -> None:
        result = runner.invoke(app, ["list", str(content_dir), "--json"])
        assert result.exit_code == 0
        records = json.loads(result.stdout)
        assert [r["slug"] for r in records] == ["post-b", "post-a"]
        assert all("source" not in r for r in records)
        assert records[1]["frontmatter"]["tags"] == [{"name": "api", "slug": "api"}]
        assert records[0]["frontmatter"]["type"] == "post"

    def test_json_full_with_type(self, runner: CliRunner, content_dir: Path) -> None:
        result = runner.invoke(
            app, ["list", str(content_dir), "--json", "--full", "--type", "article"]
        )
        assert result.exit_code == 0
        records = json.loads(result.stdout)
        assert all("compiledSource" in r["source"] for r in records)
        assert {r["frontmatter"]["type"] for r in records} == {"article"}

    def test_directory_from_config(self, runner: CliRunner, content_dir: Path, tmp_path: Path) -> None:
        config = tmp_path / "site.toml"
        config.write_text(f'[content]\ndirectory = "{content_dir.as_posix()}"\n')
        result = runner.invoke(app, ["list", "--json", "--config", str(config)])
        assert result.exit_code == 0
        assert len(json.loads(result.stdout)) == 2

    def test_empty_directory(self, runner: CliRunner, tmp_path: Path) -> None:
        empty = tmp_path / "empty"
        empty.mkdir()
        result = runner.invoke(app, ["list", str(empty)])
        assert result.exit_code == 0
        assert "No content found" in result.output

    def test_compile_error(self, runner: CliRunner, content_dir: Path) -> None:
        (content_dir / "post-bad.mdx").write_text("<Callout>\nnope\n", encoding="utf-8")
        result = runner.invoke(app, ["list", str(content_dir)])
        assert result.exit_code == 1
        assert "post-bad" in result.output

    def test_missing_directory(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(app, ["list", str(tmp_path / "nope")])
        assert result.exit_code == 1


class TestShowCommand:
    def test_show(self, runner: CliRunner, content_dir: Path) -> None:
        result = runner.invoke(app, ["show", "post-a", "--dir", str(content_dir)])
        assert result.exit_code == 0
        assert "Post A" in result.output
        assert "<strong>A</strong>" in result.output

    def test_show_json(self, runner: CliRunner, content_dir: Path) -> None:
        result = runner.invoke(app, ["show", "post-a.mdx", "--dir", str(content_dir), "--json"])
        assert result.exit_code == 0
        record = json.loads(result.stdout)
        assert record["slug"] == "post-a"
        assert record["frontmatter"]["date"] == "Sat, 01 May 2021 00:00:00 GMT"
        assert "source" in record

    def test_show_short_dir_flag(self, runner: CliRunner, content_dir: Path) -> None:
        result = runner.invoke(app, ["show", "post-b", "-d", str(content_dir), "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["slug"] == "post-b"

    def test_show_directory_from_config(
        self, runner: CliRunner, content_dir: Path, tmp_path: Path
    ) -> None:
        config = tmp_path / "site.toml"
        config.write_text(f'[content]\ndirectory = "{content_dir.as_posix()}"\n')
        result = runner.invoke(app, ["show", "post-a", "--json", "--config", str(config)])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["frontmatter"]["title"] == "Post A"

    def test_show_missing(self, runner: CliRunner, content_dir: Path) -> None:
        result = runner.invoke(app, ["show", "ghost", "--dir", str(content_dir)])
        assert result.exit_code == 1
        assert "ghost" in result.output
