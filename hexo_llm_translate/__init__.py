# hexo_llm_translate/__init__.py
"""hexo-llm-translate: 为静态站点文章生成带缓存的机器翻译双语版本。

核心是翻译编排器，它负责缓存判断、并发限制、失败重试与双层持久化。
"""

__version__ = "1.0.0"

from .config import TranslateConfig
from .orchestrator import TranslationOrchestrator
from .pipeline import TranslationPipeline
from .storage import CacheStore
from .types import CacheRecord, ContentItem, TranslationState

__all__ = [
    "__version__",
    "CacheRecord",
    "CacheStore",
    "ContentItem",
    "TranslateConfig",
    "TranslationOrchestrator",
    "TranslationPipeline",
    "TranslationState",
]
