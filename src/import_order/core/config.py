"""
Unified configuration system for import-order
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAME = ".import-order.yaml"
GLOBAL_CONFIG_PATH = Path.home() / ".import-order" / "config.yaml"

NODE_BUILTIN_MODULES = [
    "assert",
    "async_hooks",
    "buffer",
    "child_process",
    "cluster",
    "console",
    "constants",
    "crypto",
    "dgram",
    "diagnostics_channel",
    "dns",
    "domain",
    "events",
    "fs",
    "http",
    "http2",
    "https",
    "inspector",
    "module",
    "net",
    "os",
    "path",
    "perf_hooks",
    "process",
    "punycode",
    "querystring",
    "readline",
    "repl",
    "stream",
    "string_decoder",
    "sys",
    "timers",
    "tls",
    "trace_events",
    "tty",
    "url",
    "util",
    "v8",
    "vm",
    "wasi",
    "worker_threads",
    "zlib",
]


@dataclass
class OrderingConfig:
    """Configuration for import classification and ordering"""

    scope_marker: str = "@"
    builtin_prefixes: list[str] = field(default_factory=lambda: ["node:", "bun:"])
    builtin_modules: list[str] = field(
        default_factory=lambda: list(NODE_BUILTIN_MODULES)
    )
    # Matched exactly or as a "<name>/" prefix, value imports only
    framework_modules: list[str] = field(
        default_factory=lambda: ["svelte", "$app", "$env", "$service-worker"]
    )


@dataclass
class ProcessingConfig:
    """Configuration for file discovery and processing"""

    script_extensions: list[str] = field(
        default_factory=lambda: [
            ".js",
            ".mjs",
            ".cjs",
            ".jsx",
            ".ts",
            ".mts",
            ".cts",
            ".tsx",
        ]
    )
    component_extensions: list[str] = field(default_factory=lambda: [".svelte"])
    exclude_dirs: list[str] = field(
        default_factory=lambda: [
            "node_modules",
            ".git",
            ".svelte-kit",
            "dist",
            "build",
        ]
    )
    parallel_processing: bool = True
    max_workers: int = 4


@dataclass
class Config:
    """Main configuration class for import-order"""

    # General settings
    repo_path: str | None = None
    dry_run: bool = False
    check: bool = False
    show_diff: bool = False
    verbose: bool = False
    quiet: bool = False

    # Sub-configurations
    ordering: OrderingConfig = field(default_factory=OrderingConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)

    config_file: str | None = None

    @classmethod
    def from_file(cls, filepath: Path) -> "Config":
        """Load configuration from YAML or JSON file"""
        if not filepath.exists():
            logger.warning(f"Config file not found: {filepath}")
            return cls()

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                if filepath.suffix in [".yaml", ".yml"]:
                    data = yaml.safe_load(f) or {}
                elif filepath.suffix == ".json":
                    data = json.load(f)
                else:
                    logger.error(f"Unsupported config file format: {filepath.suffix}")
                    return cls()

            config = cls._from_dict(data)
            config.config_file = str(filepath)
            return config
        except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
            logger.error(f"Error loading config file {filepath}: {e}")
            return cls()

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create Config instance from dictionary"""
        config = cls()

        for key in ["repo_path", "dry_run", "check", "show_diff", "verbose", "quiet"]:
            if key in data:
                setattr(config, key, data[key])

        if "ordering" in data:
            config.ordering = OrderingConfig(**data["ordering"])
        if "processing" in data:
            config.processing = ProcessingConfig(**data["processing"])

        return config

    @classmethod
    def load_hierarchy(cls, project_dir: Path | None = None) -> "Config":
        """Load configuration from hierarchy: global -> project -> env vars"""
        config = cls()

        # 1. Load global config
        if GLOBAL_CONFIG_PATH.exists():
            config = cls.from_file(GLOBAL_CONFIG_PATH)
            logger.debug(f"Loaded global config from {GLOBAL_CONFIG_PATH}")

        # 2. Load project config
        if project_dir:
            project_config = project_dir / PROJECT_CONFIG_NAME
            if project_config.exists():
                config.merge(cls.from_file(project_config))
                logger.debug(f"Loaded project config from {project_config}")

        # 3. Apply environment variables
        config.apply_env_vars()

        return config

    def merge(self, other: "Config") -> None:
        """Merge another config into this one (other takes precedence)"""
        if other.repo_path:
            self.repo_path = other.repo_path
        if other.config_file:
            self.config_file = other.config_file

        # Boolean flags only switch on
        for flag in ["dry_run", "check", "show_diff", "verbose", "quiet"]:
            if getattr(other, flag):
                setattr(self, flag, True)

        self._merge_dataclass(self.ordering, other.ordering)
        self._merge_dataclass(self.processing, other.processing)

    def _merge_dataclass(self, target: Any, source: Any) -> None:
        """Merge the non-default fields of source into target"""
        defaults = target.__class__()
        for field_name in source.__dataclass_fields__:
            source_value = getattr(source, field_name)
            if source_value != getattr(defaults, field_name):
                setattr(target, field_name, source_value)

    def apply_env_vars(self) -> None:
        """Apply IMPORT_ORDER_* environment variables"""
        if repo_path := os.environ.get("IMPORT_ORDER_REPO_PATH"):
            self.repo_path = repo_path

        if _env_flag("IMPORT_ORDER_DRY_RUN"):
            self.dry_run = True

        if _env_flag("IMPORT_ORDER_VERBOSE"):
            self.verbose = True

        if max_workers := os.environ.get("IMPORT_ORDER_MAX_WORKERS"):
            try:
                self.processing.max_workers = int(max_workers)
            except ValueError:
                logger.warning(
                    f"Ignoring invalid IMPORT_ORDER_MAX_WORKERS: {max_workers}"
                )

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors"""
        errors = []

        if self.repo_path and not Path(self.repo_path).exists():
            errors.append(f"Repository path does not exist: {self.repo_path}")

        if not self.ordering.scope_marker:
            errors.append("Scope marker must not be empty")

        if self.processing.max_workers < 1:
            errors.append("max_workers must be at least 1")

        overlap = set(self.processing.script_extensions) & set(
            self.processing.component_extensions
        )
        if overlap:
            errors.append(
                f"Extensions configured as both script and component: {sorted(overlap)}"
            )

        for ext in (
            self.processing.script_extensions + self.processing.component_extensions
        ):
            if not ext.startswith("."):
                errors.append(f"Invalid extension (must start with '.'): {ext}")

        return errors

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary"""
        return {
            "repo_path": self.repo_path,
            "dry_run": self.dry_run,
            "check": self.check,
            "show_diff": self.show_diff,
            "verbose": self.verbose,
            "quiet": self.quiet,
            "ordering": asdict(self.ordering),
            "processing": asdict(self.processing),
        }

    def save(self, filepath: Path) -> None:
        """Save configuration to file"""
        data = self.to_dict()

        with open(filepath, "w", encoding="utf-8") as f:
            if filepath.suffix in [".yaml", ".yml"]:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
            elif filepath.suffix == ".json":
                json.dump(data, f, indent=2)
            else:
                raise ValueError(f"Unsupported config file format: {filepath.suffix}")


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ["true", "1", "yes"]
