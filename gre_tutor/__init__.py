"""Command-line GRE vocabulary tutor with week-weighted training."""

__version__ = "1.2.0"
