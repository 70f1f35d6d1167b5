"""
Unit tests for the command line interface
"""

from pathlib import Path

import yaml
from click.testing import CliRunner

from import_order import __version__
from import_order.cli import cli
from import_order.core.config import PROJECT_CONFIG_NAME

UNORDERED = "import b from 'b';\nimport a from 'a';\n"
ORDERED = "import a from 'a';\nimport b from 'b';\n"

WIDE = {"COLUMNS": "200"}


class TestCli:
    """Test CLI commands"""

    def test_version(self):
        """Test --version"""
        result = CliRunner().invoke(cli, ["--version"], obj={})

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_reorder_directory(self):
        """Test reordering a directory"""
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("src").mkdir()
            Path("src/a.ts").write_text(UNORDERED)

            result = runner.invoke(cli, ["reorder", "src"], obj={}, env=WIDE)

            assert result.exit_code == 0
            assert Path("src/a.ts").read_text() == ORDERED

    def test_check_fails_on_unordered_files(self):
        """Test --check exit status"""
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("a.ts").write_text(UNORDERED)

            result = runner.invoke(cli, ["reorder", "--check", "a.ts"], obj={}, env=WIDE)

            assert result.exit_code == 1
            assert Path("a.ts").read_text() == UNORDERED

            Path("a.ts").write_text(ORDERED)
            result = runner.invoke(cli, ["reorder", "--check", "a.ts"], obj={}, env=WIDE)

            assert result.exit_code == 0

    def test_dry_run_with_diff(self):
        """Test --dry-run --diff"""
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("a.ts").write_text(UNORDERED)

            result = runner.invoke(
                cli, ["reorder", "--dry-run", "--diff", "a.ts"], obj={}, env=WIDE
            )

            assert result.exit_code == 0
            assert "+import b from 'b';" in result.output
            assert Path("a.ts").read_text() == UNORDERED

    def test_jobs_must_be_positive(self):
        """Test --jobs validation"""
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["reorder", "--jobs", "0", "."], obj={})

            assert result.exit_code == 2

    def test_invalid_project_config(self):
        """Test configuration errors stop the run"""
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path(PROJECT_CONFIG_NAME).write_text(
                yaml.safe_dump({"processing": {"max_workers": 0}})
            )

            result = runner.invoke(cli, ["reorder", "."], obj={})

            assert result.exit_code == 1
            assert "max_workers" in result.output

    def test_reorder_outside_repository(self):
        """Test changed-file mode without a work tree"""
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["reorder", "--repo", "."], obj={})

            assert result.exit_code == 1
            assert "Not a valid Git repository" in result.output

    def test_explain(self, unordered_script):
        """Test the explain command"""
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("api.ts").write_text(unordered_script)

            result = runner.invoke(cli, ["explain", "api.ts"], obj={}, env=WIDE)

            assert result.exit_code == 0
            assert "TYPE_SCOPED" in result.output

    def test_explain_unsupported_file(self):
        """Test explain on an unsupported file"""
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("notes.md").write_text("# notes\n")

            result = runner.invoke(cli, ["explain", "notes.md"], obj={})

            assert result.exit_code == 1
            assert "Unsupported file kind" in result.output

    def test_init(self):
        """Test init creates and protects the project config"""
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["init"], obj={})

            assert result.exit_code == 0
            config_data = yaml.safe_load(Path(PROJECT_CONFIG_NAME).read_text())
            assert config_data["ordering"]["scope_marker"] == "@"

            Path(PROJECT_CONFIG_NAME).write_text("processing:\n  max_workers: 2\n")
            result = runner.invoke(cli, ["init"], obj={}, input="n\n")

            assert result.exit_code == 1
            assert "max_workers: 2" in Path(PROJECT_CONFIG_NAME).read_text()
