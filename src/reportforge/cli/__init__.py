"""reportforge command-line interface."""
