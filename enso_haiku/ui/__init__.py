"""pygame rendering for the enso scene."""
from __future__ import annotations

from enso_haiku.ui.render import Compositor

__all__ = ["Compositor"]
