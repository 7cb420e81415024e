"""Grid instances, conflicts, MDDs and agent dependency checks for multi-agent path finding."""

__version__ = "0.1.0"

__all__ = ["common", "conflict", "instance", "mdd", "dependency"]