"""Static linter and skill-file auditor for AI agent configuration."""

__version__ = "0.1.0"
