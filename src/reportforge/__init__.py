"""reportforge - benchmark run report extraction and result file generation."""

__version__ = "0.1.0"
