# hexo_llm_translate/types.py
"""
本模块定义了翻译流水线的核心数据类型。

``CacheRecord`` 的字段别名沿用 JSON 缓存文件中的 camelCase 键名，
以便与已有的缓存文件和远程表中的数据保持兼容。
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TranslationState(str, Enum):
    """单篇文章在编排器中经历的状态。"""

    SKIPPED = "SKIPPED"
    MANUAL = "MANUAL"
    CACHE_HIT = "CACHE_HIT"
    PENDING = "PENDING"
    TRANSLATING = "TRANSLATING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class ContentItem(BaseModel):
    """由站点生成器传入的一篇文章。编排器只读取它，返回的是修改后的副本。"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    source: str
    title: str = ""
    body: str = ""
    layout: str = "post"
    skip: bool = Field(default=False, alias="no_translate")


class CacheRecord(BaseModel):
    """以文章源路径为键持久化的一次成功翻译。"""

    model_config = ConfigDict(populate_by_name=True)

    hash: str
    model: str
    original_title: Optional[str] = Field(default=None, alias="originalTitle")
    translated_title: str = Field(alias="translatedTitle")
    wrapped_content: str = Field(alias="wrappedContent")

    def matches(self, digest: str, model: str) -> bool:
        """指纹与模型都一致时记录才可复用。"""
        return self.hash == digest and self.model == model

    def to_json(self) -> dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)


class TitlePair(BaseModel):
    """原文标题与译文标题的对应关系，仅用于生成客户端查找表。"""

    original: str
    translated: str


class ManualTranslation(BaseModel):
    """手工翻译文件的解析结果。"""

    title: Optional[str] = None
    body: str


class TranslationDraft(BaseModel):
    """后端返回并通过校验的译文。"""

    title: str
    body: str


class TranslationOutcome(BaseModel):
    """编排器处理一篇文章后的结果。"""

    item: ContentItem
    state: TranslationState
    error: Optional[str] = None
