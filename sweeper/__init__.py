"""Resource Sweeper - deduplicate and clean up externally-owned resources."""

from __future__ import annotations

__version__ = "0.1.0"
