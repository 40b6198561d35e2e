"""Grant lookup cache."""

from authzcore.infrastructure.cache.grant_cache import CachingGrantStore, GrantCache

__all__ = ["CachingGrantStore", "GrantCache"]
