"""
Explain command: show how each statement of a file is classified
"""

import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.text import Text

from import_order.core.config import Config
from import_order.core.engine import explain_component, explain_script
from import_order.core.errors import ParseError
from import_order.core.partitioner import flatten, partition
from import_order.core.path_analyzer import FileKind, PathAnalyzer
from import_order.core.records import StatementRecord
from import_order.core.sorter import sort_imports

logger = logging.getLogger(__name__)


class ExplainCommand:
    """Prints the classification of every statement in a file"""

    def __init__(self, config: Config, console: Console | None = None):
        self.config = config
        self.console = console or Console()

    def execute(self, file_path: Path) -> list[list[StatementRecord]]:
        """
        Classify a file's statements and print one table per script block

        Returns:
            Classified records of each block, in input order

        Raises:
            ParseError: the file kind is not supported or the file cannot be
                parsed
        """
        kind = PathAnalyzer.from_config(self.config).get_file_kind(file_path)
        if kind is FileKind.UNKNOWN:
            raise ParseError(f"Unsupported file kind: {file_path}")

        try:
            content = file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"Cannot decode {file_path}: {e}") from e

        if kind is FileKind.SCRIPT:
            blocks = [explain_script(content, self.config)]
        else:
            blocks = explain_component(content, self.config)

        for number, records in enumerate(blocks, start=1):
            title = str(file_path)
            if kind is FileKind.COMPONENT:
                title = f"{file_path} <script> #{number}"
            self.console.print(self.build_table(title, records, kind))

        return blocks

    @staticmethod
    def target_positions(
        records: list[StatementRecord], kind: FileKind
    ) -> dict[int, int]:
        """Map each record's original index to its position after reordering"""
        if kind is FileKind.SCRIPT:
            ordered = sort_imports(records)
        else:
            ordered = flatten(partition(records))
        return {record.original_index: pos for pos, record in enumerate(ordered)}

    def build_table(
        self,
        title: str,
        records: list[StatementRecord],
        kind: FileKind,
    ) -> Table:
        positions = self.target_positions(records, kind)

        table = Table(title=Text(title), show_header=True, header_style="bold")
        table.add_column("#", justify="right")
        table.add_column("→", justify="right")
        table.add_column("Class")
        table.add_column("Module")
        table.add_column("Statement")

        for record in records:
            if record.is_import and kind is FileKind.SCRIPT:
                label = record.category.name
            elif record.is_import:
                label = f"IMPORTS / {record.category.name}"
            else:
                label = record.bucket.name if record.bucket else "UNCLASSIFIED"

            first_line = record.text.splitlines()[0] if record.text else ""
            if record.is_multiline:
                first_line += " …"

            table.add_row(
                str(record.original_index),
                str(positions[record.original_index]),
                label,
                Text(record.module_path or ""),
                Text(first_line),
            )

        return table
