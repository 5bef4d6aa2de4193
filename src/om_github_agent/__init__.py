"""OM GitHub Agent - create pull requests from GitHub issue comments."""

__version__ = "0.1.0"
