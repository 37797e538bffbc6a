"""Install AI agent skills and keep their symbolic links in sync."""

__version__ = "0.0.8"

__all__ = ["__version__"]