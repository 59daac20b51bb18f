"""Integration tests for the CLI commands"""

from typer.testing import CliRunner

from mdsite.cli.cli import app


runner = CliRunner()


def test_build_cmd_renders_site(content_dir, tmp_path):
    """build writes one page per published post and reports drafts."""
    result = runner.invoke(app, ["build", str(content_dir), "--out-dir", str(tmp_path / "dist")])

    assert result.exit_code == 0, result.output
    assert "2 built, 1 drafts skipped, 0 failed" in result.output
    assert (tmp_path / "dist" / "memory-leaks" / "index.html").exists()
    assert (tmp_path / "dist" / "index.json").exists()


def test_build_cmd_defaults_to_content_dir(content_dir, tmp_path):
    """With no path, build reads content_dir and writes output_dir from settings."""
    result = runner.invoke(app, ["build", "--drafts"])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "public" / "notes" / "index.html").exists()


def test_build_cmd_reports_failures(content_dir, tmp_path):
    (content_dir / "posts" / "broken.md").write_text("---\ntitle: Broken\n", encoding="utf-8")
    result = runner.invoke(app, ["build", str(content_dir), "--out-dir", str(tmp_path / "dist")])

    assert result.exit_code == 1
    assert "1 failed" in result.output
    assert "broken.md" in result.output
    assert (tmp_path / "dist" / "hello-world" / "index.html").exists()


def test_build_cmd_missing_path():
    result = runner.invoke(app, ["build", "nowhere"])
    assert result.exit_code == 1
    assert "Error: Path not found" in result.output


def test_render_cmd(tmp_path):
    f = tmp_path / "x.md"
    f.write_text('---\ntitle: "X"\ndate: 2025-01-01\n---\n# Hello', encoding="utf-8")
    result = runner.invoke(app, ["render", str(f)])
    assert result.exit_code == 0, result.output
    assert result.output == '<h1 id="hello">Hello</h1>\n'


def test_render_cmd_malformed(tmp_path):
    f = tmp_path / "bad.md"
    f.write_text("---\ntitle: X\n# Hello\n", encoding="utf-8")
    result = runner.invoke(app, ["render", str(f)])
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "Unterminated" in result.output


def test_check_cmd(content_dir):
    result = runner.invoke(app, ["check", str(content_dir)])
    assert result.exit_code == 0, result.output
    assert "ok (draft)" in result.output
    assert "Checked 3 document(s), 0 with errors" in result.output


def test_check_cmd_flags_missing_keys(content_dir):
    (content_dir / "posts" / "untitled.md").write_text("---\ndate: 2024-01-01\n---\n", encoding="utf-8")
    result = runner.invoke(app, ["check", str(content_dir)])
    assert result.exit_code == 1
    assert "Missing required metadata: title" in result.output


def test_meta_cmd_round_trips(sample_post, tmp_path):
    f = tmp_path / "post.md"
    f.write_text(sample_post, encoding="utf-8")
    result = runner.invoke(app, ["meta", str(f)])
    assert result.exit_code == 0, result.output
    assert result.output.startswith("---\ntitle: Common memory leaks in mobile apps\n")
    assert "ShowToc: true" in result.output


def test_invalid_config_yaml(tmp_path):
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    result = runner.invoke(app, ["check", "."])
    assert result.exit_code == 1
    assert "Invalid config.yaml" in result.output


def test_render_cmd_undecodable_file(tmp_path):
    f = tmp_path / "binary.md"
    f.write_bytes(b"---\ntitle: X\n---\n\xff\xfe\n")
    result = runner.invoke(app, ["render", str(f)])
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "UTF-8" in result.output


def test_check_cmd_reports_bad_date_without_traceback(content_dir):
    (content_dir / "posts" / "bad-date.md").write_text("---\ntitle: X\ndate: 2025-13-01\n---\n", encoding="utf-8")
    result = runner.invoke(app, ["check", str(content_dir)])
    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "month must be in 1..12" in result.output
    assert "Checked 4 document(s), 1 with errors" in result.output
