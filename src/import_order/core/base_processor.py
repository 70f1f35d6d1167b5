"""
Base processor interface for file processing operations
"""

import difflib
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from import_order.core.config import Config
from import_order.core.errors import ParseError, VerificationError
from import_order.core.path_analyzer import FileKind

logger = logging.getLogger(__name__)


class ProcessingStatus(Enum):
    """Status of processing operation"""

    SUCCESS = "success"
    ERROR = "error"
    SKIPPED = "skipped"
    NO_CHANGES = "no_changes"


@dataclass
class ProcessResult:
    """Result of a processing operation"""

    file_path: Path
    status: ProcessingStatus
    changes_applied: int = 0
    error_message: str | None = None
    diff: str | None = None
    written: bool = False

    def __str__(self) -> str:
        """String representation"""
        if self.status == ProcessingStatus.SUCCESS:
            action = "reordered" if self.written else "would be reordered"
            return f"✓ {self.file_path}: {action}"
        elif self.status == ProcessingStatus.NO_CHANGES:
            return f"= {self.file_path}: Already ordered"
        elif self.status == ProcessingStatus.SKIPPED:
            return f"⊝ {self.file_path}: Skipped ({self.error_message})"
        else:
            return f"✗ {self.file_path}: {self.error_message}"


class BaseProcessor(ABC):
    """Abstract base class for all file processors"""

    file_kind: FileKind = FileKind.UNKNOWN

    def __init__(
        self,
        config: Config | None = None,
    ):
        """
        Initialize processor

        Args:
            config: Configuration object
        """
        self.config = config or Config()
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def transform(self, content: str) -> str:
        """
        Reorder file content in memory

        Args:
            content: Current file content

        Returns:
            Reordered content (identical to the input when already ordered)

        Raises:
            ParseError: content is not recognizable as this file kind
            VerificationError: the reordering broke one of its guarantees
        """
        pass

    def process_file(
        self,
        file_path: Path,
    ) -> ProcessResult:
        """
        Process a single file

        The file is read once, reordered entirely in memory and written back
        with a single atomic replace, only when its content changed and the
        configuration allows writing.

        Args:
            file_path: Path to file to process

        Returns:
            ProcessResult with operation details
        """
        try:
            original = self.read_file(file_path)
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning(f"Skipping {file_path}: {e}")
            return ProcessResult(
                file_path=file_path,
                status=ProcessingStatus.SKIPPED,
                error_message=f"Unreadable file: {e}",
            )

        try:
            reordered = self.transform(original)
        except ParseError as e:
            self.logger.warning(f"Skipping {file_path}: {e}")
            return ProcessResult(
                file_path=file_path,
                status=ProcessingStatus.SKIPPED,
                error_message=str(e),
            )
        except VerificationError as e:
            self.logger.error(f"Internal reordering error in {file_path}: {e}")
            return ProcessResult(
                file_path=file_path,
                status=ProcessingStatus.ERROR,
                error_message=str(e),
            )
        except Exception as e:
            self.logger.error(f"Error processing {file_path}: {e}")
            return ProcessResult(
                file_path=file_path,
                status=ProcessingStatus.ERROR,
                error_message=f"Unexpected error: {e}",
            )

        if reordered == original:
            self.logger.debug(f"No changes needed for {file_path}")
            return ProcessResult(file_path=file_path, status=ProcessingStatus.NO_CHANGES)

        diff = self.make_diff(file_path, original, reordered)

        if self.config.dry_run or self.config.check:
            self.logger.info(f"[DRY RUN] Would reorder {file_path}")
            return ProcessResult(
                file_path=file_path,
                status=ProcessingStatus.SUCCESS,
                changes_applied=1,
                diff=diff,
            )

        try:
            self.write_file(file_path, reordered)
        except OSError as e:
            self.logger.error(f"Error writing {file_path}: {e}")
            return ProcessResult(
                file_path=file_path,
                status=ProcessingStatus.ERROR,
                error_message=f"Write failed: {e}",
            )

        self.logger.info(f"Reordered {file_path}")
        return ProcessResult(
            file_path=file_path,
            status=ProcessingStatus.SUCCESS,
            changes_applied=1,
            diff=diff,
            written=True,
        )

    def read_file(
        self,
        file_path: Path,
    ) -> str:
        """
        Read file content without translating line endings

        Args:
            file_path: Path to file

        Returns:
            File content as string
        """
        with open(file_path, "r", encoding="utf-8", newline="") as f:
            return f.read()

    def write_file(
        self,
        file_path: Path,
        content: str,
    ) -> None:
        """
        Atomically replace a file's content

        The content goes to a temporary file in the same directory which then
        replaces the target, so the target is never left half-written.

        Args:
            file_path: Path to file
            content: Content to write
        """
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{file_path.name}.", suffix=".tmp", dir=file_path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            if file_path.exists():
                os.chmod(tmp_name, file_path.stat().st_mode)
            os.replace(tmp_name, file_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    @staticmethod
    def make_diff(file_path: Path, before: str, after: str) -> str:
        """Unified diff between two versions of a file"""
        return "".join(
            difflib.unified_diff(
                before.splitlines(keepends=True),
                after.splitlines(keepends=True),
                fromfile=f"a/{file_path}",
                tofile=f"b/{file_path}",
            )
        )
