# Taptik Metadata Vocabulary
# Technology dictionary, stop words and name tables used for tagging

import re

MAX_KEYWORDS = 50
MAX_DESCRIPTION_LENGTH = 200

# Token -> canonical technology name
TECHNOLOGIES: dict[str, str] = {
    # Build tools
    "next": "nextjs",
    "nextjs": "nextjs",
    "vite": "vite",
    "webpack": "webpack",
    "rollup": "rollup",
    "parcel": "parcel",
    "esbuild": "esbuild",
    # Test frameworks
    "jest": "jest",
    "vitest": "vitest",
    "mocha": "mocha",
    "cypress": "cypress",
    "playwright": "playwright",
    "selenium": "selenium",
    "pytest": "python",
    # Linters and formatters
    "eslint": "eslint",
    "prettier": "prettier",
    "biome": "biome",
    "stylelint": "stylelint",
    "ruff": "ruff",
    "black": "black",
    # Containers and orchestration
    "docker": "docker",
    "kubernetes": "kubernetes",
    "k8s": "kubernetes",
    "kubectl": "kubernetes",
    "helm": "helm",
    "compose": "docker-compose",
    # Frontend frameworks
    "react": "react",
    "redux": "redux",
    "vue": "vue",
    "vuex": "vuex",
    "angular": "angular",
    "svelte": "svelte",
    "solid": "solidjs",
    "qwik": "qwik",
    # Backend frameworks
    "express": "express",
    "fastify": "fastify",
    "nestjs": "nestjs",
    "koa": "koa",
    "hapi": "hapi",
    "django": "django",
    "flask": "flask",
    "fastapi": "fastapi",
    "rails": "rails",
    "laravel": "laravel",
    "spring": "spring",
    # Languages
    "typescript": "typescript",
    "javascript": "javascript",
    "python": "python",
    "rust": "rust",
    "golang": "golang",
    "java": "java",
    "kotlin": "kotlin",
    "swift": "swift",
    # Package managers and runtimes
    "node": "nodejs",
    "nodejs": "nodejs",
    "npm": "nodejs",
    "npx": "nodejs",
    "pnpm": "nodejs",
    "yarn": "nodejs",
    "bun": "bun",
    "pip": "python",
    "poetry": "python",
    "uv": "python",
    "cargo": "rust",
    "maven": "java",
    "gradle": "java",
}

# Source file extensions that reveal a language
EXTENSION_LANGUAGES: dict[str, str] = {
    "ts": "typescript",
    "tsx": "typescript",
    "py": "python",
    "rs": "rust",
    "go": "golang",
}

# Technology -> stack side, used for the fullstack tag
STACK_SIDES: dict[str, str] = {
    "typescript": "frontend",
    "javascript": "frontend",
    "react": "frontend",
    "vue": "frontend",
    "angular": "frontend",
    "svelte": "frontend",
    "nextjs": "frontend",
    "python": "backend",
    "rust": "backend",
    "golang": "backend",
    "java": "backend",
    "kotlin": "backend",
    "express": "backend",
    "nestjs": "backend",
    "django": "backend",
    "flask": "backend",
    "fastapi": "backend",
    "rails": "backend",
    "spring": "backend",
}

STOP_WORDS: frozenset[str] = frozenset(
    {
        "the", "and", "for", "with", "use", "all", "new", "can", "has", "this",
        "that", "from", "will", "are", "was", "been", "have", "had", "were",
        "said", "each", "which", "she", "their", "what", "not", "but", "out",
        "them", "than", "then", "its", "also", "echo", "run", "help", "about",
        "more", "less", "very", "much", "many", "some", "any", "only", "you",
        "your", "when", "into", "should", "always", "never",
    }
)

# settings.features flag -> feature name
FEATURE_NAMES: dict[str, str] = {
    "gitIntegration": "git-integration",
    "dockerSupport": "docker",
    "kubernetesIntegration": "kubernetes",
    "autocomplete": "autocomplete",
    "linting": "linting",
    "formatting": "formatting",
    "debugging": "debugging",
}

# Feature name -> pattern searched in lowercased command text
COMMAND_FEATURES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("docker", re.compile(r"docker")),
    ("kubernetes", re.compile(r"kubectl|k8s|kubernetes|helm")),
    ("git-integration", re.compile(r"\bgit\b")),
    ("testing", re.compile(r"test")),
    ("linting", re.compile(r"lint")),
    ("formatting", re.compile(r"format|prettier")),
)

HIGHLIGHT_FEATURES = ("git-integration", "docker", "kubernetes", "mcp-servers")

TOKEN_SPLIT = re.compile(r"[\s!\"'(),.:;?\[\]_{|}/=<>`*#-]+")
EXTENSION_PATTERN = re.compile(r"\.(tsx?|py|rs|go)\b")


def tokenize(text: str) -> list[str]:
    """Split lowercased text into tokens on whitespace and punctuation."""
    return [token for token in TOKEN_SPLIT.split(text.lower()) if token]


def detect_technologies(text: str) -> set[str]:
    """
    Find technologies mentioned in free text or a shell command.

    Args:
        text: Text to scan.

    Returns:
        Canonical technology names.
    """
    lowered = text.lower()
    found = {TECHNOLOGIES[token] for token in tokenize(lowered) if token in TECHNOLOGIES}
    for extension in EXTENSION_PATTERN.findall(lowered):
        found.add(EXTENSION_LANGUAGES[extension])
    return found
