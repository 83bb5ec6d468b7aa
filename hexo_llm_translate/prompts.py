# hexo_llm_translate/prompts.py
"""构造发送给模型的提示词，并解析模型按约定分隔格式返回的结果。"""

import re
from typing import Any, Optional

from hexo_llm_translate.exceptions import ResponseFormatError
from hexo_llm_translate.markup import PAIRED_TAGS
from hexo_llm_translate.utils import language_display_name

TITLE_START, TITLE_END = "[TITLE_START]", "[TITLE_END]"
CONTENT_START, CONTENT_END = "[CONTENT_START]", "[CONTENT_END]"

_TITLE_PATTERN = re.compile(re.escape(TITLE_START) + r"(.*?)" + re.escape(TITLE_END), re.S)
_CONTENT_PATTERN = re.compile(
    re.escape(CONTENT_START) + r"(.*?)" + re.escape(CONTENT_END), re.S
)


def build_system_prompt(target_lang: str = "en") -> str:
    language = language_display_name(target_lang)
    tag_examples = ", ".join(f"{{% {tag} %}}" for tag in PAIRED_TAGS)
    return f"""You are a professional technical translator.
1. Translate the following Markdown content to {language}.
2. DO NOT translate or modify placeholders like [CODE_BLOCK_N]. Keep them exactly as they are.
3. DO NOT translate technical identifiers or Hexo tags (like {tag_examples}, etc.). Keep ALL {{% ... %}} and {{% ... %}}...{{% end... %}} tag pairs EXACTLY as they are.
4. DO NOT modify any HTML tags or their attributes (e.g., keep <span class="xxx"> as it is).
5. Maintain all Markdown formatting.
6. Also translate the title provided.
7. Output ONLY the translated text. NO explanations, NO notes, NO meta-comments.
Format your response as: {TITLE_START}translated title{TITLE_END}{CONTENT_START}translated content{CONTENT_END}"""


def build_user_message(title: str, content: str) -> str:
    return f"Title: {title}\n\nContent: {content}"


def build_chat_payload(
    model: str, title: str, content: str, target_lang: str = "en"
) -> dict[str, Any]:
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": build_system_prompt(target_lang)},
            {"role": "user", "content": build_user_message(title, content)},
        ],
    }


def extract_message_content(response: Any) -> str:
    """从 chat completions 响应中取出 ``choices[0].message.content``。"""
    try:
        content = response["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise ResponseFormatError("API 响应中缺少 choices[0].message.content。") from e
    if not isinstance(content, str) or not content:
        raise ResponseFormatError("API 返回了空的消息内容。")
    return content


def parse_delimited_response(raw: str) -> tuple[Optional[str], str]:
    """
    按分隔标记拆出标题与正文。

    缺少正文标记或正文为空时抛出 ResponseFormatError；标题标记缺失时返回 None，
    由调用方决定回退值。
    """
    content_match = _CONTENT_PATTERN.search(raw)
    if content_match is None:
        raise ResponseFormatError(f"响应中缺少 {CONTENT_START}/{CONTENT_END} 标记。")
    body = content_match.group(1)
    if not body.strip():
        raise ResponseFormatError("响应中的译文正文为空。")

    title_match = _TITLE_PATTERN.search(raw)
    title = title_match.group(1).strip() if title_match else None
    return title or None, body
