# hexo_llm_translate/markup.py
"""
本模块处理译文前后的文本变换：代码块占位、结构校验与模板标签转义。

这里的函数都是纯函数，便于单独测试。
"""

import re
from collections.abc import Iterable

from hexo_llm_translate.exceptions import MalformedHtmlError, TagMismatchError

CODE_BLOCK_PATTERN = re.compile(r"```[\s\S]*?```")
PLACEHOLDER_PATTERN = re.compile(r"\[CODE_BLOCK_(\d+)\]")

# 需要成对出现的模板标签，例如 {% note %} ... {% endnote %}
PAIRED_TAGS: tuple[str, ...] = ("note", "tabs", "codeblock")

# 引号内的值整体匹配，可以包含 ">"；结束的 ">" 前残留的孤立引号即为畸形属性
_HTML_TAG = re.compile(r"""<[a-zA-Z][\w-]*((?:"[^"<]*"|'[^'<]*'|[^"'<>])*)(["']?)>""")
_UNKNOWN_TEMPLATE_OPEN = re.compile(r"\{%(?!\s*/?\w[\w-]*)")


def placeholder(index: int) -> str:
    return f"[CODE_BLOCK_{index}]"


def extract_code_blocks(content: str) -> tuple[str, list[str]]:
    """将围栏代码块替换为 ``[CODE_BLOCK_N]`` 占位符，返回替换后的文本与代码块列表。"""
    code_blocks: list[str] = []

    def _replace(match: re.Match[str]) -> str:
        code_blocks.append(match.group(0))
        return placeholder(len(code_blocks) - 1)

    return CODE_BLOCK_PATTERN.sub(_replace, content), code_blocks


def restore_code_blocks(content: str, code_blocks: list[str]) -> str:
    """
    将占位符按序号还原为原始代码块。

    单次扫描完成替换，已还原的代码块不会被再次扫描；每个序号只替换第一次出现，
    未知序号原样保留。
    """
    restored: set[int] = set()

    def _replace(match: re.Match[str]) -> str:
        index = int(match.group(1))
        if index >= len(code_blocks) or index in restored:
            return match.group(0)
        restored.add(index)
        return code_blocks[index]

    return PLACEHOLDER_PATTERN.sub(_replace, content)


def find_malformed_attributes(content: str) -> list[str]:
    """返回引号不成对的 HTML 开始标签，例如 ``<span class=xxx">``。"""
    malformed = []
    for match in _HTML_TAG.finditer(content):
        if match.group(2):
            malformed.append(match.group(0))
    return malformed


def count_template_tags(content: str, tag: str) -> tuple[int, int]:
    open_count = len(re.findall(r"\{%\s*" + re.escape(tag) + r"\b", content))
    close_count = len(re.findall(r"\{%\s*end" + re.escape(tag) + r"\b", content))
    return open_count, close_count


def validate_translated_content(
    content: str, tags: Iterable[str] = PAIRED_TAGS
) -> None:
    """校验译文结构，发现问题时抛出 TranslationValidationError 的子类。"""
    malformed = find_malformed_attributes(content)
    if malformed:
        raise MalformedHtmlError(
            f"LLM generated malformed HTML attributes: {malformed[0]}"
        )

    for tag in tags:
        open_count, close_count = count_template_tags(content, tag)
        if open_count != close_count:
            raise TagMismatchError(tag, open_count, close_count)


def sanitize_template_tags(content: str) -> str:
    """把后面没有跟合法标签名的 ``{%`` 转义为 HTML 实体，避免模板引擎解析失败。"""
    return _UNKNOWN_TEMPLATE_OPEN.sub("&#123;%", content)
