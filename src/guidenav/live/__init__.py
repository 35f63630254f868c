"""Live reload support."""

from guidenav.live.reload import LiveReloadManager

__all__ = ["LiveReloadManager"]
