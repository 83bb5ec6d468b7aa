# hexo_llm_translate/utils.py
"""本模块包含项目范围内的通用工具函数。"""

import re

from langcodes import Language
from langcodes.tag_parser import LanguageTagError

# 语言子标签应该由 2-3 个字母组成 (BCP 47)
LANGUAGE_SUBTAG_PATTERN = re.compile(r"^[a-zA-Z]{2,3}$")


def validate_lang_code(code: str) -> str:
    """校验语言代码是否符合 BCP 47 规范，返回其主语言子标签（如 'zh-CN' -> 'zh'）。"""
    try:
        lang = Language.get(code)
        if not lang.language or not LANGUAGE_SUBTAG_PATTERN.match(lang.language):
            raise LanguageTagError(
                f"Tag '{code}' lacks a valid 2-3 letter language subtag."
            )
    except LanguageTagError as e:
        raise ValueError(f"提供的语言代码 '{code}' 格式无效。原因: {e}") from e
    return lang.language


def language_display_name(code: str) -> str:
    """返回语言代码对应的英文名称，用于构造提示词。"""
    return Language.get(code).display_name("en")
