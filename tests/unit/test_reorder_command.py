"""
Unit tests for the reorder command
"""

import io

import pytest
from rich.console import Console

from import_order.commands.reorder import ReorderCommand, ReorderSummary
from import_order.core.base_processor import ProcessingStatus, ProcessResult
from import_order.core.config import Config
from import_order.core.engine import reorder_script

UNORDERED = "import b from 'b';\nimport a from 'a';\n"
ORDERED = "import a from 'a';\nimport b from 'b';\n"


def _console() -> Console:
    return Console(file=io.StringIO(), width=200, color_system=None)


def _command(config: Config) -> ReorderCommand:
    return ReorderCommand(config, console=_console())


def _output(command: ReorderCommand) -> str:
    return command.console.file.getvalue()


class TestReorderSummary:
    """Test summary counts and exit codes"""

    def _summary(self, *statuses, check=False):
        return ReorderSummary(
            results=[ProcessResult(f"f{i}.ts", s) for i, s in enumerate(statuses)],
            check=check,
        )

    def test_counts(self):
        """Test per-status counters"""
        summary = self._summary(
            ProcessingStatus.SUCCESS,
            ProcessingStatus.NO_CHANGES,
            ProcessingStatus.NO_CHANGES,
            ProcessingStatus.SKIPPED,
        )

        assert summary.changed == 1
        assert summary.unchanged == 2
        assert summary.skipped == 1
        assert summary.errors == 0
        assert summary.exit_code == 0

    def test_errors_fail(self):
        """Test any error gives exit code 1"""
        assert self._summary(ProcessingStatus.ERROR).exit_code == 1

    def test_check_fails_on_changes(self):
        """Test check mode exit code"""
        assert self._summary(ProcessingStatus.SUCCESS, check=True).exit_code == 1
        assert self._summary(ProcessingStatus.NO_CHANGES, check=True).exit_code == 0
        assert self._summary(ProcessingStatus.SKIPPED, check=True).exit_code == 0


class TestExplicitPaths:
    """Test reordering files and directories given on the command line"""

    def test_files_and_directories(self, temp_dir, unordered_component, ordered_component):
        """Test a mix of files and directories"""
        lib = temp_dir / "src" / "lib"
        lib.mkdir(parents=True)
        (lib / "a.ts").write_text(UNORDERED)
        (lib / "Card.svelte").write_text(unordered_component)
        (lib / "notes.md").write_text("# notes\n")
        vendored = temp_dir / "node_modules" / "x"
        vendored.mkdir(parents=True)
        (vendored / "index.js").write_text(UNORDERED)

        command = _command(Config())
        summary = command.execute([temp_dir])

        assert summary.changed == 2
        assert (lib / "a.ts").read_text() == ORDERED
        assert (lib / "Card.svelte").read_text() == ordered_component
        assert (vendored / "index.js").read_text() == UNORDERED
        assert "2 reordered" in _output(command)

    def test_nothing_to_do(self, temp_dir):
        """Test an empty directory"""
        summary = _command(Config()).execute([temp_dir])

        assert summary.results == []
        assert summary.exit_code == 0

    def test_check_mode(self, temp_dir):
        """Test check mode reports without writing"""
        (temp_dir / "a.ts").write_text(UNORDERED)
        (temp_dir / "b.ts").write_text(ORDERED)

        command = _command(Config(check=True))
        summary = command.execute([temp_dir])

        assert summary.changed == 1
        assert summary.unchanged == 1
        assert summary.exit_code == 1
        assert (temp_dir / "a.ts").read_text() == UNORDERED
        assert "would be reordered" in _output(command)

    def test_diff_output(self, temp_dir):
        """Test diffs are printed"""
        (temp_dir / "a.ts").write_text(UNORDERED)

        command = _command(Config(dry_run=True, show_diff=True))
        command.execute([temp_dir / "a.ts"])

        output = _output(command)
        assert "--- a/" in output
        assert "-import b from 'b';" in output

    def test_quiet_prints_nothing(self, temp_dir):
        """Test quiet mode"""
        (temp_dir / "a.ts").write_text(UNORDERED)

        command = _command(Config(quiet=True))
        command.execute([temp_dir])

        assert _output(command) == ""

    def test_unchanged_rows_only_when_verbose(self, temp_dir):
        """Test the summary table hides ordered files"""
        (temp_dir / "ordered.ts").write_text(ORDERED)

        quiet_command = _command(Config())
        quiet_command.execute([temp_dir])
        verbose_command = _command(Config(verbose=True))
        verbose_command.execute([temp_dir])

        assert "ordered.ts" not in _output(quiet_command)
        assert "ordered.ts" in _output(verbose_command)

    def test_bracketed_paths_are_printed_verbatim(self, temp_dir):
        """Test route folders are not taken as markup"""
        route = temp_dir / "[slug]"
        route.mkdir()
        (route / "+page.ts").write_text(UNORDERED)

        command = _command(Config())
        command.execute([temp_dir])

        assert "[slug]" in _output(command)

    def test_parallel_matches_sequential(self, temp_dir):
        """Test concurrent processing gives the same results in the same order"""
        for i in range(6):
            (temp_dir / f"m{i}.ts").write_text(UNORDERED if i % 2 else ORDERED)

        sequential = Config(dry_run=True)
        sequential.processing.parallel_processing = False
        parallel = Config(dry_run=True)
        parallel.processing.max_workers = 3

        first = _command(sequential).execute([temp_dir])
        second = _command(parallel).execute([temp_dir])

        assert [(r.file_path, r.status) for r in first.results] == [
            (r.file_path, r.status) for r in second.results
        ]

    def test_unexpected_failure_does_not_stop_other_files(self, temp_dir, mocker):
        """Test one failing file still lets the others be processed"""
        bad = temp_dir / "bad.ts"
        bad.write_text("// broken\n" + UNORDERED)
        good = temp_dir / "good.ts"
        good.write_text(UNORDERED)

        def flaky(content, ordering):
            if content.startswith("// broken"):
                raise IndexError("boom")
            return reorder_script(content, ordering)

        mocker.patch("import_order.core.processors.reorder_script", side_effect=flaky)

        summary = _command(Config()).execute([bad, good])

        assert [(r.file_path, r.status) for r in summary.results] == [
            (bad, ProcessingStatus.ERROR),
            (good, ProcessingStatus.SUCCESS),
        ]
        assert "boom" in summary.results[0].error_message
        assert good.read_text() == ORDERED
        assert summary.exit_code == 1


class TestChangedFiles:
    """Test reordering the changed files of a Git work tree"""

    def test_only_changed_files(self, test_repo, git):
        """Test committed files are left alone"""
        (test_repo / "committed.ts").write_text(UNORDERED)
        git(test_repo, "add", "committed.ts")
        git(test_repo, "commit", "-m", "Add committed")
        (test_repo / "new.ts").write_text(UNORDERED)

        summary = _command(Config(repo_path=str(test_repo))).execute()

        assert [r.file_path for r in summary.results] == [test_repo / "new.ts"]
        assert (test_repo / "new.ts").read_text() == ORDERED
        assert (test_repo / "committed.ts").read_text() == UNORDERED

    def test_since_reference(self, test_repo, git):
        """Test files changed since a commit"""
        (test_repo / "committed.ts").write_text(UNORDERED)
        git(test_repo, "add", "committed.ts")
        git(test_repo, "commit", "-m", "Add committed")

        summary = _command(Config(repo_path=str(test_repo))).execute(since="HEAD~1")

        assert [r.file_path for r in summary.results] == [test_repo / "committed.ts"]

    def test_paths_restrict_changed_files(self, test_repo):
        """Test paths narrow down the changed files"""
        (test_repo / "src").mkdir()
        (test_repo / "src" / "a.ts").write_text(UNORDERED)
        (test_repo / "other.ts").write_text(UNORDERED)

        summary = _command(Config(repo_path=str(test_repo))).execute(
            [test_repo / "src"], since="HEAD"
        )

        assert [r.file_path for r in summary.results] == [test_repo / "src" / "a.ts"]
        assert (test_repo / "other.ts").read_text() == UNORDERED

    def test_excluded_directories(self, test_repo):
        """Test changed files in excluded directories"""
        build = test_repo / "build"
        build.mkdir()
        (build / "bundle.js").write_text(UNORDERED)

        summary = _command(Config(repo_path=str(test_repo))).execute()

        assert summary.results == []

    def test_not_a_repository(self, temp_dir):
        """Test a missing work tree"""
        with pytest.raises(ValueError, match="Not a valid Git repository"):
            _command(Config(repo_path=str(temp_dir / "missing"))).execute()

    def test_invalid_reference(self, test_repo):
        """Test an unknown commit reference"""
        with pytest.raises(ValueError, match="Invalid commit reference"):
            _command(Config(repo_path=str(test_repo))).execute(since="nope")
