"""Define constants naming commonly used reference frames."""

DEFAULT_FRAME = "base"
"""Global reference frame assumed when a pose doesn't specify one (the arm's base link)."""
