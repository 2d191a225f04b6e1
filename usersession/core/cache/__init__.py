from usersession.core.cache.base import CacheDriver, validate_cache_driver
from usersession.core.cache.json_file import JsonFileCacheDriver
from usersession.core.cache.memory import MemoryCacheDriver

__all__ = ["CacheDriver", "validate_cache_driver", "JsonFileCacheDriver", "MemoryCacheDriver"]
