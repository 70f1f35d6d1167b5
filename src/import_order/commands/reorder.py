"""
Reorder command: collect target files, process them and report
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.text import Text

from import_order.core.base_processor import ProcessingStatus, ProcessResult
from import_order.core.config import Config
from import_order.core.git_manager import GitManager
from import_order.core.path_analyzer import PathAnalyzer
from import_order.core.processors import get_processor

logger = logging.getLogger(__name__)

_STATUS_STYLES = {
    ProcessingStatus.SUCCESS: "green",
    ProcessingStatus.NO_CHANGES: "dim",
    ProcessingStatus.SKIPPED: "yellow",
    ProcessingStatus.ERROR: "red",
}


@dataclass
class ReorderSummary:
    """Aggregated results of a reorder run"""

    results: list[ProcessResult] = field(default_factory=list)
    check: bool = False

    def _count(self, status: ProcessingStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def changed(self) -> int:
        return self._count(ProcessingStatus.SUCCESS)

    @property
    def unchanged(self) -> int:
        return self._count(ProcessingStatus.NO_CHANGES)

    @property
    def skipped(self) -> int:
        return self._count(ProcessingStatus.SKIPPED)

    @property
    def errors(self) -> int:
        return self._count(ProcessingStatus.ERROR)

    @property
    def exit_code(self) -> int:
        if self.errors:
            return 1
        if self.check and self.changed:
            return 1
        return 0


class ReorderCommand:
    """Command handler for reordering files"""

    def __init__(self, config: Config, console: Console | None = None):
        """Initialize reorder command with configuration"""
        self.config = config
        self.console = console or Console()
        self.analyzer = PathAnalyzer.from_config(config)

    def execute(
        self,
        paths: list[Path] | None = None,
        since: str | None = None,
    ) -> ReorderSummary:
        """
        Reorder the given files, or the changed files of the Git work tree

        Args:
            paths: Files or directories to process. When empty, the files
                changed in the work tree are processed.
            since: Also include files changed since this commit reference

        Returns:
            ReorderSummary with one result per processed file
        """
        targets = self.collect_targets(paths or [], since)
        summary = ReorderSummary(check=self.config.check)

        if not targets:
            logger.info("No files to reorder")
            return summary

        logger.info(f"Processing {len(targets)} files")
        summary.results = self.process_files(targets)

        if self.config.show_diff:
            self._print_diffs(summary.results)
        if not self.config.quiet:
            self.print_summary(summary)

        return summary

    # ========================================================================
    # TARGET COLLECTION
    # ========================================================================

    def collect_targets(self, paths: list[Path], since: str | None = None) -> list[Path]:
        """
        Supported files to process

        Raises:
            ValueError: no paths were given and the repository is not a Git
                work tree, or ``since`` is not a valid commit reference
        """
        if paths and not since:
            analysis = self.analyzer.analyze(paths)
            logger.debug(
                f"{analysis.total_files} supported files, "
                f"{len(analysis.skipped)} other files skipped"
            )
            return analysis.files

        git_manager = GitManager(self.config.repo_path)
        if since:
            changed = git_manager.get_files_changed_since(since)
        else:
            changed = git_manager.get_changed_files()

        changed = [
            path
            for path in changed
            if not self.analyzer.is_excluded(path.relative_to(git_manager.repo_path))
        ]
        if paths:
            roots = [path.resolve() for path in paths]
            changed = [
                path
                for path in changed
                if any(path.resolve().is_relative_to(root) for root in roots)
            ]

        logger.debug(f"{len(changed)} changed files in {git_manager.repo_path}")
        return self.analyzer.analyze(changed).files

    # ========================================================================
    # PROCESSING
    # ========================================================================

    def process_file(self, file_path: Path) -> ProcessResult:
        processor = get_processor(file_path, self.config)
        if processor is None:
            return ProcessResult(
                file_path=file_path,
                status=ProcessingStatus.SKIPPED,
                error_message="Unsupported file kind",
            )
        result = processor.process_file(file_path)
        logger.debug(str(result))
        return result

    def process_files(self, files: list[Path]) -> list[ProcessResult]:
        """Process files, concurrently when enabled; results keep input order"""
        processing = self.config.processing
        if not processing.parallel_processing or len(files) == 1:
            return [self.process_file(file_path) for file_path in files]

        workers = min(processing.max_workers, len(files))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self.process_file, files))

    # ========================================================================
    # REPORTING
    # ========================================================================

    def _print_diffs(self, results: list[ProcessResult]) -> None:
        for result in results:
            if result.diff:
                self.console.print(result.diff, markup=False, highlight=False, end="")

    def print_summary(self, summary: ReorderSummary) -> None:
        """Print a table of the files that need attention and the totals"""
        rows = [
            r
            for r in summary.results
            if self.config.verbose or r.status != ProcessingStatus.NO_CHANGES
        ]

        if rows:
            table = Table(show_header=True, header_style="bold")
            table.add_column("File")
            table.add_column("Status")
            table.add_column("Details")
            for result in rows:
                style = _STATUS_STYLES[result.status]
                table.add_row(
                    Text(str(result.file_path)),
                    Text(self._status_label(result), style=style),
                    Text(result.error_message or ""),
                )
            self.console.print(table)

        verb = "would be reordered" if self.config.dry_run or summary.check else "reordered"
        self.console.print(
            f"[bold]{summary.changed}[/bold] {verb}, "
            f"{summary.unchanged} already ordered, "
            f"{summary.skipped} skipped, "
            f"[{'red' if summary.errors else 'green'}]{summary.errors} errors[/]"
        )

    def _status_label(self, result: ProcessResult) -> str:
        if result.status == ProcessingStatus.SUCCESS:
            return "reordered" if result.written else "would reorder"
        if result.status == ProcessingStatus.NO_CHANGES:
            return "ordered"
        return result.status.value
