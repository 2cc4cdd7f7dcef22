"""
Configuration models and defaults for readme-generator.

Holds the constants that bound repository scanning, the provider/model catalogue,
and the dataclasses passed between the scanning, prompting and rendering stages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path

KILOBYTE = 1024
MEGABYTE = KILOBYTE * KILOBYTE

# Scanning limits
MAX_FILE_BYTES = 100 * KILOBYTE
MAX_TOTAL_BYTES = 2 * MEGABYTE
MAX_FILE_CONTENT_CHARS = 100_000

# Prompt/README limits
RECENT_TAGS_LIMIT = 5
TOP_ITEMS_LIMIT = 5
MAX_TOP_CONTRIBUTORS = 10

DEFAULT_OUTPUT_FILE = "README.md"
DEFAULT_LANGUAGE = "en"
DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_AWS_REGION = "us-east-1"
AZURE_OPENAI_API_VERSION = "2024-10-21"

DEFAULT_TEMPERATURE = 0.7
OPENAI_MAX_TOKENS = 16_384
ANTHROPIC_MAX_TOKENS = 16_384
GOOGLE_MAX_TOKENS = 16_384
OLLAMA_TIMEOUT_SECONDS = 600


class LLMProvider(str, Enum):
    """Supported LLM providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    AZURE_OPENAI = "azure-openai"
    AWS_BEDROCK = "aws-bedrock"
    OLLAMA = "ollama"


class ScanDepth(IntEnum):
    """Directory recursion depth used when collecting source files."""

    SKIP = 0
    SHALLOW = 1
    MEDIUM = 2
    DEEP = 3
    VERY_DEEP = 5
    EXTREME = 7


SCAN_DEPTH_LABELS: dict[ScanDepth, str] = {
    ScanDepth.SHALLOW: "Shallow (1 level)",
    ScanDepth.MEDIUM: "Medium (2 levels)",
    ScanDepth.DEEP: "Deep (3 levels)",
    ScanDepth.VERY_DEEP: "Very deep (5 levels)",
    ScanDepth.EXTREME: "Extreme (7 levels) - may take time",
    ScanDepth.SKIP: "Skip file scanning",
}

DEFAULT_SCAN_DEPTH = ScanDepth.DEEP

LANGUAGE_CHOICES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "ru": "Russian",
}

# Environment variables holding provider credentials
API_KEY_ENV_VARS: dict[LLMProvider, str] = {
    LLMProvider.OPENAI: "OPENAI_API_KEY",
    LLMProvider.ANTHROPIC: "ANTHROPIC_API_KEY",
    LLMProvider.GOOGLE: "GOOGLE_API_KEY",
    LLMProvider.AZURE_OPENAI: "AZURE_OPENAI_API_KEY",
    LLMProvider.AWS_BEDROCK: "AWS_BEDROCK_API_KEY",
    LLMProvider.OLLAMA: "OLLAMA_API_KEY",
}

# Environment variables holding provider endpoints
BASE_URL_ENV_VARS: dict[LLMProvider, str] = {
    LLMProvider.AZURE_OPENAI: "AZURE_OPENAI_ENDPOINT",
    LLMProvider.OLLAMA: "OLLAMA_BASE_URL",
}

GITHUB_TOKEN_ENV_VAR = "GITHUB_TOKEN"

# Model choices offered in interactive mode; the first entry is the default.
MODEL_CHOICES: dict[LLMProvider, list[str]] = {
    LLMProvider.OPENAI: [
        "gpt-4.1",
        "gpt-4.1-mini",
        "gpt-4o",
        "gpt-4o-mini",
        "o3",
        "o4-mini",
    ],
    LLMProvider.ANTHROPIC: [
        "claude-sonnet-4-5",
        "claude-opus-4-1",
        "claude-haiku-4-5",
        "claude-3-7-sonnet-latest",
        "claude-3-5-haiku-latest",
    ],
    LLMProvider.GOOGLE: [
        "gemini-2.5-flash",
        "gemini-2.5-pro",
        "gemini-2.0-flash",
        "gemini-1.5-pro",
    ],
    LLMProvider.AZURE_OPENAI: [
        "gpt-4.1",
        "gpt-4o",
        "gpt-4o-mini",
        "o4-mini",
    ],
    LLMProvider.AWS_BEDROCK: [
        "anthropic.claude-sonnet-4-5-20250929-v1:0",
        "anthropic.claude-3-7-sonnet-20250219-v1:0",
        "anthropic.claude-3-5-sonnet-20241022-v2:0",
        "anthropic.claude-3-5-haiku-20241022-v1:0",
    ],
    LLMProvider.OLLAMA: [
        "llama3.2",
        "llama3.1",
        "qwen2.5-coder",
        "mistral",
        "gemma3",
        "phi4",
    ],
}

# Extensions collected for LLM context
CODE_FILE_EXTENSIONS: set[str] = {
    ".py", ".pyi",
    ".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs",
    ".go", ".rs", ".java", ".kt", ".rb", ".php", ".cs", ".swift", ".scala",
    ".c", ".h", ".cpp", ".hpp",
    ".vue", ".svelte", ".astro",
    ".json", ".yaml", ".yml", ".toml", ".xml", ".ini", ".cfg",
    ".md", ".mdx", ".rst", ".txt",
    ".sh", ".bash",
    ".dockerfile",
}

# Files without a matching extension that are still collected
SPECIAL_FILE_NAMES: set[str] = {
    "dockerfile",
    "makefile",
    "license",
    "readme",
    "procfile",
    "jenkinsfile",
}

# Default glob patterns to exclude
DEFAULT_EXCLUDE_GLOBS: set[str] = {
    "node_modules/**",
    "dist/**",
    "build/**",
    "coverage/**",
    "target/**",
    "vendor/**",
    "__pycache__/**",
    ".venv/**",
    "venv/**",
    ".tox/**",
    "*.egg-info/**",
    ".git/**",
    ".idea/**",
    ".vscode/**",
    ".cache/**",
    ".next/**",
    ".nuxt/**",
    ".turbo/**",
    ".svelte-kit/**",
    "*.log",
    "*.lock",
    "package-lock.json",
    "pnpm-lock.yaml",
    ".env",
    ".env.*",
    "*.min.js",
    "*.min.css",
    "*.map",
    ".DS_Store",
}

# Directory names skipped while walking and in the rendered tree
IGNORED_DIR_NAMES: set[str] = {
    ".cache", ".git", ".idea", ".next", ".nuxt", ".turbo", ".vscode", ".venv",
    "venv", "__pycache__", "build", "coverage", "dist", "node_modules", "target",
    ".tox", ".eggs", ".mypy_cache", ".pytest_cache", ".ruff_cache",
}

CHANGELOG_FILE_NAMES = ["CHANGELOG.md", "CHANGELOG", "changelog.md"]

# Language detection by extension (used for the language breakdown)
EXTENSION_TO_LANGUAGE: dict[str, str] = {
    ".py": "Python",
    ".pyi": "Python",
    ".js": "JavaScript",
    ".jsx": "JavaScript",
    ".mjs": "JavaScript",
    ".cjs": "JavaScript",
    ".ts": "TypeScript",
    ".tsx": "TypeScript",
    ".go": "Go",
    ".rs": "Rust",
    ".java": "Java",
    ".kt": "Kotlin",
    ".rb": "Ruby",
    ".php": "PHP",
    ".cs": "C#",
    ".swift": "Swift",
    ".scala": "Scala",
    ".c": "C",
    ".h": "C",
    ".cpp": "C++",
    ".hpp": "C++",
    ".vue": "Vue",
    ".svelte": "Svelte",
    ".astro": "Astro",
    ".sh": "Shell",
    ".bash": "Shell",
}


def get_language(extension: str) -> str | None:
    """Return the display language for a file extension, or None for non-code files."""
    return EXTENSION_TO_LANGUAGE.get(extension.lower())


@dataclass
class ScannedFile:
    """A file collected for LLM context.

    Attributes:
        path: Absolute path to the file on disk.
        relative_path: Repository-relative path using forward slashes.
        size_bytes: File size in bytes.
        extension: Lowercased file extension including leading dot (may be empty).
        content: Decoded file content.
    """

    path: Path
    relative_path: str
    size_bytes: int
    extension: str
    content: str = ""

    @property
    def language(self) -> str | None:
        return get_language(self.extension)


@dataclass
class ScanStats:
    """Statistics from scanning a repository."""

    files_scanned: int = 0
    files_included: int = 0
    files_skipped_size: int = 0
    files_skipped_binary: int = 0
    files_skipped_extension: int = 0
    files_skipped_gitignore: int = 0
    files_skipped_glob: int = 0
    files_skipped_unreadable: int = 0
    total_bytes_included: int = 0
    total_limit_reached: bool = False
    skipped_large_files: list[str] = field(default_factory=list)
