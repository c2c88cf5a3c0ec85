"""shellstrap - Converge a shell environment to a declared state."""

__version__ = "0.1.0"
