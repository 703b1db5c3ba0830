"""Bootstrap a repository with the Nix dev-environment template kit."""

__version__ = "0.1.0"
