"""
Pytest configuration and shared fixtures
"""

import shutil
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing"""
    temp_path = Path(tempfile.mkdtemp()).resolve()
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def unordered_script() -> str:
    """TypeScript module with an unordered import block"""
    return """// API client

import { z } from 'zod';
import type { Session } from './session';
import { readFile } from 'node:fs/promises';
import type { RequestEvent } from '@sveltejs/kit';
import { helper } from './helper';
import { json } from '@sveltejs/kit';

export const schema = z.object({});
"""


@pytest.fixture
def ordered_script() -> str:
    """The unordered_script fixture after reordering"""
    return """// API client

import type { RequestEvent } from '@sveltejs/kit';

import type { Session } from './session';

import { json } from '@sveltejs/kit';

import { readFile } from 'node:fs/promises';

import { z } from 'zod';

import { helper } from './helper';

export const schema = z.object({});
"""


@pytest.fixture
def unordered_component() -> str:
    """Legacy-syntax Svelte component with an unordered preamble"""
    return """<script>
\timport { onMount } from 'svelte';
\timport Button from './Button.svelte';
\timport { writable } from 'svelte/store';

\tfunction increment() {
\t\tcount += 1;
\t}

\tconst MAX = 10;
\texport let title;
\tlet count = 0;
\t$: doubled = count * 2;
\tonMount(() => {
\t\tconsole.log('mounted');
\t});
\tconst store = writable(0);
\tconst dispatch = createEventDispatcher();
</script>

<h1>{title}</h1>
"""


@pytest.fixture
def ordered_component() -> str:
    """The unordered_component fixture after reordering"""
    return """<script>
\timport { onMount } from 'svelte';
\timport { writable } from 'svelte/store';

\timport Button from './Button.svelte';

\texport let title;

\tlet count = 0;

\t$: doubled = count * 2;

\tconst MAX = 10;

\tfunction increment() {
\t\tcount += 1;
\t}

\tconst dispatch = createEventDispatcher();

\tconst store = writable(0);

\tonMount(() => {
\t\tconsole.log('mounted');
\t});
</script>

<h1>{title}</h1>
"""


def _git(repo: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=repo, capture_output=True, check=True)


@pytest.fixture
def test_repo(temp_dir: Path) -> Path:
    """Create a test Git repository"""
    # Initialize Git repo
    _git(temp_dir, "init")
    _git(temp_dir, "config", "user.email", "test@test.com")
    _git(temp_dir, "config", "user.name", "Test User")

    # Create initial commit
    (temp_dir / "README.md").write_text("Test Repository")
    _git(temp_dir, "add", ".")
    _git(temp_dir, "commit", "-m", "Initial commit")

    return temp_dir


@pytest.fixture
def git():
    """Run git commands inside a repository"""
    return _git
