"""Bundled data files (theme, zshrc template)."""
