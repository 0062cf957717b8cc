# Main integrations package
from . import adapters, base, core

__all__ = ["adapters", "base", "core"]
