from .executors import probe_tools, run_sync

__all__ = ["probe_tools", "run_sync"]
