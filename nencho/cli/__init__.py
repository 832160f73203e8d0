"""nencho command-line interface."""
