"""secretsweep: pattern-based detection of secrets and endpoints in source files."""

__version__ = "0.1.0"
