"""flowguard — deterministic validation for automation workflow files."""

__version__ = "0.1.0"
