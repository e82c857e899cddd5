"""tile-drop: a falling-block puzzle where equal tiles merge and double."""

__version__ = "0.1.0"
