"""Process-level settings shared by the CLI and the HTTP API."""
