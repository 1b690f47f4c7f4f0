"""Local HTTP API for cover extraction and tool status."""
