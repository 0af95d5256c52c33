from referensi_scraper.cache.facade import JsonCache
from referensi_scraper.cache.keys import CacheKey, key_from_url, normalize_key
from referensi_scraper.cache.store import CacheEntry, JsonFileStore

__all__ = ["CacheEntry", "CacheKey", "JsonCache", "JsonFileStore", "key_from_url", "normalize_key"]
