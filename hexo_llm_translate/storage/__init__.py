# hexo_llm_translate/storage/__init__.py
"""翻译结果的持久化层。"""

from hexo_llm_translate.storage.local import LocalCacheFile
from hexo_llm_translate.storage.postgres import PostgresCacheTier
from hexo_llm_translate.storage.store import CacheStore

__all__ = ["CacheStore", "LocalCacheFile", "PostgresCacheTier"]
