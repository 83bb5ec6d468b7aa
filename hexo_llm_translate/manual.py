# hexo_llm_translate/manual.py
"""
手工翻译：若 ``_posts/hello.md`` 旁存在 ``_posts/hello.en.md``，
则直接使用其中的标题与正文，不再调用模型。
"""

from pathlib import Path
from typing import Optional

import structlog

from hexo_llm_translate.frontmatter import split_front_matter
from hexo_llm_translate.types import ManualTranslation

logger = structlog.get_logger(__name__)


class ManualTranslationLoader:
    def __init__(self, source_dir: Path, target_lang: str = "en"):
        self.source_dir = Path(source_dir)
        self.target_lang = target_lang

    def manual_path(self, source: str) -> Path:
        """``_posts/hello.md`` -> ``<source_dir>/_posts/hello.en.md``"""
        relative = Path(source)
        return self.source_dir / relative.with_name(
            f"{relative.stem}.{self.target_lang}{relative.suffix}"
        )

    def is_manual_file(self, path: Path) -> bool:
        """判断一个文件本身是否就是手工翻译文件。"""
        return Path(path).stem.endswith(f".{self.target_lang}")

    def has_manual_translation(self, source: str) -> bool:
        return self.manual_path(source).is_file()

    def load_manual_translation(self, source: str) -> Optional[ManualTranslation]:
        path = self.manual_path(source)
        if not path.is_file():
            return None
        try:
            front_matter, body = split_front_matter(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.warning("无法读取手工翻译文件。", path=str(path), error=str(e))
            return None

        title = (front_matter or {}).get("title")
        return ManualTranslation(
            title=str(title).strip() if title else None, body=body.strip()
        )
