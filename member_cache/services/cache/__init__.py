from .read_through import ReadThroughCache

__all__ = ["ReadThroughCache"]
