"""Issue-driven code generation and pull request evaluation for GitHub."""

__version__ = "0.1.0"
