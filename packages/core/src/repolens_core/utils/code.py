"""Language tables and the file selection heuristic.

The tables are fixed data: extending support for a language means adding a
row here, nothing else.
"""

from __future__ import annotations

from repolens_core.models import FileEntry

# Presentation order matters: the CLI lists languages in this order.
LANGUAGE_LABELS = {
    "javascript": "JavaScript",
    "python": "Python",
    "typescript": "TypeScript",
    "java": "Java",
    "csharp": "C#",
    "go": "Go",
    "rust": "Rust",
    "html": "HTML",
    "css": "CSS",
    "cpp": "C++",
    "php": "PHP",
    "ruby": "Ruby",
    "swift": "Swift",
    "kotlin": "Kotlin",
    "sql": "SQL",
    "markdown": "Markdown",
    "json": "JSON",
    "shell": "Shell Script",
}

LANGUAGE_EXTENSIONS = {
    "javascript": [".js", ".jsx"],
    "python": [".py"],
    "typescript": [".ts", ".tsx"],
    "java": [".java"],
    "csharp": [".cs"],
    "go": [".go"],
    "rust": [".rs"],
    "html": [".html", ".htm"],
    "css": [".css"],
    "cpp": [".cpp", ".cxx", ".h", ".hpp"],
    "php": [".php"],
    "ruby": [".rb"],
    "swift": [".swift"],
    "kotlin": [".kt", ".kts"],
    "sql": [".sql"],
    "markdown": [".md", ".markdown"],
    "json": [".json"],
    "shell": [".sh", ".bash"],
}

# Files under these top-level directories are ranked ahead of everything else.
SOURCE_DIRS = ["src", "app", "lib", "source", "sources", "main"]

# Top-level directories that never hold code worth reviewing: dependencies,
# build output, tests, docs and VCS metadata.
IGNORED_DIRS = [
    "node_modules",
    "dist",
    "build",
    "target",
    "vendor",
    "test",
    "tests",
    "docs",
    "examples",
    ".git",
    ".github",
    "assets",
    "static",
]

MAX_FILES_TO_REVIEW = 5


def get_extensions(language: str) -> list[str]:
    """Return the registered extensions for a language, or [] if unsupported."""
    return list(LANGUAGE_EXTENSIONS.get(language.lower(), []))


def _starts_with_dir(path: str, dirs: list[str]) -> bool:
    lower = path.lower()
    return any(lower.startswith(d + "/") for d in dirs)


def is_ignored_path(path: str) -> bool:
    return _starts_with_dir(path, IGNORED_DIRS)


def is_source_path(path: str) -> bool:
    return _starts_with_dir(path, SOURCE_DIRS)


def matches_language(path: str, extensions: list[str]) -> bool:
    lower = path.lower()
    return any(lower.endswith(ext) for ext in extensions)


def select_files(entries: list[FileEntry], language: str, max_files: int = MAX_FILES_TO_REVIEW) -> list[FileEntry]:
    """Pick the files to send for review, best candidates first.

    Keeps files matching the language's extensions outside ignored directories,
    then sorts files under a source directory ahead of the rest, alphabetically
    within each tier, and caps the result at max_files. Content size is not
    considered here; the budget is enforced while assembling.

    Returns [] for an unsupported language or when nothing matches.
    """
    extensions = get_extensions(language)
    if not extensions:
        return []

    candidates = [
        e for e in entries if e.kind == "file" and matches_language(e.path, extensions) and not is_ignored_path(e.path)
    ]
    candidates.sort(key=lambda e: (not is_source_path(e.path), e.path))
    return candidates[:max_files]
