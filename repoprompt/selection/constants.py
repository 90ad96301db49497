"""Fixed tables driving path exclusion, scoring and selection."""

from __future__ import annotations

HARD_EXCLUDED_DIRS: tuple[str, ...] = (
    "venv",
    ".venv",
    "node_modules",
    ".git",
    "__pycache__",
    "dist",
    "build",
)

# Local scans also skip compiled Rust/Maven output.
LOCAL_EXCLUDED_DIRS: tuple[str, ...] = HARD_EXCLUDED_DIRS + ("target",)

SECRET_PATTERNS: tuple[str, ...] = (
    ".env",
    ".pem",
    ".key",
    ".cert",
    ".p12",
    "secrets.json",
    "credentials.json",
    "id_rsa",
)

DEPENDENCY_MANIFESTS: tuple[str, ...] = (
    "package.json",
    "requirements.txt",
    "go.mod",
    "Cargo.toml",
    "pom.xml",
    "build.gradle",
)

README_NAME = "readme.md"

SOURCE_EXTENSIONS: tuple[str, ...] = (
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    ".py",
    ".go",
    ".rs",
    ".java",
    ".cpp",
    ".c",
    ".h",
    ".cs",
    ".md",
)

TEST_DIR_NAMES: frozenset[str] = frozenset({"test", "tests", "__tests__"})

AUX_KEYWORDS: tuple[str, ...] = (
    "build",
    "setup",
    "config",
    "webpack",
    "vite",
    "rollup",
    "gulpfile",
    "backup",
    "manage.py",
    "scripts/",
    "tools/",
    "docs/",
    "example",
    "demo",
    "migrations/",
)

CORE_DIRS: tuple[str, ...] = ("src/", "lib/", "app/", "core/", "pkg/", "internal/")

IMPORTANT_NAMES: tuple[str, ...] = (
    "main",
    "index",
    "app",
    "server",
    "core",
    "manager",
    "parser",
    "api",
    "router",
    "handler",
    "controller",
    "service",
    "model",
    "database",
)

TEST_PENALTY = 50
AUX_PENALTY = 30
CORE_DIR_BONUS = 20
IMPORTANT_NAME_BONUS = 10

DEFAULT_MAX_FILES = 5
MIN_MAX_FILES = 1
MAX_MAX_FILES = 200

DEFAULT_TREE_CAP = 1000


__all__ = [
    "AUX_KEYWORDS",
    "AUX_PENALTY",
    "CORE_DIRS",
    "CORE_DIR_BONUS",
    "DEFAULT_MAX_FILES",
    "DEFAULT_TREE_CAP",
    "DEPENDENCY_MANIFESTS",
    "HARD_EXCLUDED_DIRS",
    "IMPORTANT_NAMES",
    "IMPORTANT_NAME_BONUS",
    "LOCAL_EXCLUDED_DIRS",
    "MAX_MAX_FILES",
    "MIN_MAX_FILES",
    "README_NAME",
    "SECRET_PATTERNS",
    "SOURCE_EXTENSIONS",
    "TEST_DIR_NAMES",
    "TEST_PENALTY",
]
