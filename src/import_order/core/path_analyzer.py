"""
File kind registry and target discovery.

Decides which pipeline a file goes through (plain script or component)
and expands directories into the files that can be reordered.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)


class FileKind(Enum):
    """Enumeration of supported file kinds"""

    SCRIPT = "script"
    COMPONENT = "component"
    UNKNOWN = "unknown"


@dataclass
class FileKindInfo:
    """Information about a file kind"""

    kind: FileKind
    extensions: set[str]
    description: str


@dataclass
class PathAnalysis:
    """Result of analyzing a set of target paths"""

    script_files: list[Path] = field(default_factory=list)
    component_files: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)

    @property
    def files(self) -> list[Path]:
        return sorted(self.script_files + self.component_files)

    @property
    def total_files(self) -> int:
        return len(self.script_files) + len(self.component_files)


class PathAnalyzer:
    """File kind registry with directory expansion"""

    def __init__(
        self,
        script_extensions: list[str] | None = None,
        component_extensions: list[str] | None = None,
        exclude_dirs: list[str] | None = None,
    ):
        self._extension_map: dict[str, FileKind] = {}
        self.exclude_dirs = set(
            exclude_dirs
            if exclude_dirs is not None
            else ["node_modules", ".git", ".svelte-kit", "dist", "build"]
        )

        self.register_file_kind(
            FileKindInfo(
                kind=FileKind.SCRIPT,
                extensions=set(
                    script_extensions
                    or [".js", ".mjs", ".cjs", ".jsx", ".ts", ".mts", ".cts", ".tsx"]
                ),
                description="JavaScript/TypeScript modules",
            )
        )
        self.register_file_kind(
            FileKindInfo(
                kind=FileKind.COMPONENT,
                extensions=set(component_extensions or [".svelte"]),
                description="Svelte components",
            )
        )

    @classmethod
    def from_config(cls, config) -> "PathAnalyzer":
        """Build an analyzer from a Config's processing section"""
        processing = config.processing
        return cls(
            script_extensions=processing.script_extensions,
            component_extensions=processing.component_extensions,
            exclude_dirs=processing.exclude_dirs,
        )

    def register_file_kind(self, info: FileKindInfo) -> None:
        """Register a file kind and its extensions"""
        for ext in info.extensions:
            self._extension_map[ext.lower()] = info.kind

    def get_file_kind(self, file_path: Path) -> FileKind:
        # .d.ts files hold declarations only
        if file_path.name.endswith((".d.ts", ".d.mts", ".d.cts")):
            return FileKind.UNKNOWN
        return self._extension_map.get(file_path.suffix.lower(), FileKind.UNKNOWN)

    def is_excluded(self, path: Path) -> bool:
        return any(part in self.exclude_dirs for part in path.parts)

    def analyze(self, paths: list[Path]) -> PathAnalysis:
        """Expand directories and sort the targets by file kind"""
        analysis = PathAnalysis()
        seen: set[Path] = set()

        for path in paths:
            if path.is_dir():
                candidates = sorted(p for p in path.rglob("*") if p.is_file())
                candidates = [
                    p for p in candidates if not self.is_excluded(p.relative_to(path))
                ]
            elif path.is_file():
                candidates = [path]
            else:
                logger.debug(f"Skipping missing path: {path}")
                continue

            for candidate in candidates:
                if candidate in seen:
                    continue
                seen.add(candidate)

                kind = self.get_file_kind(candidate)
                if kind is FileKind.SCRIPT:
                    analysis.script_files.append(candidate)
                elif kind is FileKind.COMPONENT:
                    analysis.component_files.append(candidate)
                else:
                    analysis.skipped.append(candidate)

        logger.debug(
            f"Found {len(analysis.script_files)} script and "
            f"{len(analysis.component_files)} component files"
        )
        return analysis

