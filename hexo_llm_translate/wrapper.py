# hexo_llm_translate/wrapper.py
"""把原文与译文合并为一份双语内容。"""

import json

CONTAINER_CLASS_PREFIX = "hexo-llm-"


def container_class(lang: str) -> str:
    return f"{CONTAINER_CLASS_PREFIX}{lang}"


def script_json(value: object) -> str:
    """序列化为可以安全嵌入 <script> 的 JSON。"""
    return json.dumps(value, ensure_ascii=False).replace("</", "<\\/")


def wrap_content(
    original_body: str,
    translated_body: str,
    original_title: str,
    translated_title: str,
    source_lang: str = "zh",
    target_lang: str = "en",
) -> str:
    """
    生成双语内容：一段暴露两个标题的内联脚本，加上两个按语言区分的容器。

    容器内外的空行不可省略，否则 Markdown 渲染器会把正文与 <div> 合并成同一个块。
    """
    title_script = (
        "<script>\n"
        f"window._{source_lang}_title = {script_json(original_title)};\n"
        f"window._{target_lang}_title = {script_json(translated_title)};\n"
        "</script>\n\n"
    )
    return (
        f"{title_script}\n"
        f'<div class="{container_class(source_lang)}">\n\n'
        f"{original_body}\n\n"
        "</div>\n"
        f'<div class="{container_class(target_lang)}">\n\n'
        f"{translated_body}\n\n"
        "</div>"
    )
