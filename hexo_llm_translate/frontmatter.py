# hexo_llm_translate/frontmatter.py
"""拆分 Markdown 文件开头的 YAML front matter。"""

import re
from typing import Any, Optional

import yaml

_FRONT_MATTER = re.compile(r"\A---\r?\n([\s\S]*?)\r?\n---[ \t]*(?:\r?\n|\Z)([\s\S]*)\Z")


def split_front_matter(text: str) -> tuple[Optional[dict[str, Any]], str]:
    """
    返回 (front matter 映射, 正文)。

    没有 front matter 时返回 (None, 原文)。YAML 无法解析或顶层不是映射时
    抛出 ValueError。
    """
    match = _FRONT_MATTER.match(text)
    if match is None:
        return None, text
    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"front matter 不是合法的 YAML: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("front matter 的顶层必须是映射")
    return data, match.group(2)


def render_front_matter(data: dict[str, Any], body: str) -> str:
    header = yaml.safe_dump(data, allow_unicode=True, sort_keys=False).rstrip("\n")
    return f"---\n{header}\n---\n{body}"
