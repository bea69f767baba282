"""Keep gettext catalogs in sync with their source and translate the backlog."""

__version__ = "0.1.0"
