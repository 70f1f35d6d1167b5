"""
Concrete processors for plain-script and component files
"""

from pathlib import Path

from import_order.core.base_processor import BaseProcessor
from import_order.core.config import Config
from import_order.core.engine import reorder_component, reorder_script
from import_order.core.path_analyzer import FileKind, PathAnalyzer


class ScriptProcessor(BaseProcessor):
    """Reorders the leading import block of JavaScript/TypeScript modules"""

    file_kind = FileKind.SCRIPT

    def transform(self, content: str) -> str:
        return reorder_script(content, self.config.ordering)


class ComponentProcessor(BaseProcessor):
    """Reorders the script preambles of Svelte components"""

    file_kind = FileKind.COMPONENT

    def transform(self, content: str) -> str:
        return reorder_component(content, self.config.ordering)


PROCESSORS: dict[FileKind, type[BaseProcessor]] = {
    processor.file_kind: processor for processor in (ScriptProcessor, ComponentProcessor)
}


def get_processor(file_path: Path, config: Config | None = None) -> BaseProcessor | None:
    """Processor for a file, or None when its kind is not supported"""
    config = config or Config()
    kind = PathAnalyzer.from_config(config).get_file_kind(file_path)
    processor_class = PROCESSORS.get(kind)
    return processor_class(config) if processor_class else None
