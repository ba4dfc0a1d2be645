"""Group uncommitted changes and commit each group with an LLM-written message."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("llmcommitter")
except PackageNotFoundError:
    # Fallback for development mode
    __version__ = "0.0.0-dev"
