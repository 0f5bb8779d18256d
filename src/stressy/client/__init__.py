"""User-facing entrypoints: the Flask API and the command-line tools."""
