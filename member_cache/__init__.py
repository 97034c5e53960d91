"""
Member Cache

Caching facade over the Member store backed by Redis.
"""

__version__ = "0.1.0"
