# hexo_llm_translate/posts.py
"""读取站点源目录中的文章，并把处理后的文章写回输出目录。"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

from hexo_llm_translate.frontmatter import render_front_matter, split_front_matter
from hexo_llm_translate.manual import ManualTranslationLoader
from hexo_llm_translate.types import ContentItem

logger = structlog.get_logger(__name__)

POSTS_DIR = "_posts"


@dataclass
class Post:
    path: Path
    front_matter: dict[str, Any]
    item: ContentItem


def discover_posts(source_dir: Path, manual: ManualTranslationLoader) -> list[Path]:
    """列出 ``_posts`` 下的全部 Markdown 文件，手工翻译文件除外。"""
    posts_dir = Path(source_dir) / POSTS_DIR
    if not posts_dir.is_dir():
        return []
    return sorted(
        path for path in posts_dir.rglob("*.md") if not manual.is_manual_file(path)
    )


def load_post(path: Path, source_dir: Path) -> Post:
    front_matter, body = split_front_matter(path.read_text(encoding="utf-8"))
    front_matter = front_matter or {}
    item = ContentItem(
        source=path.relative_to(source_dir).as_posix(),
        title=str(front_matter.get("title") or ""),
        body=body,
        layout=str(front_matter.get("layout") or "post"),
        skip=bool(front_matter.get("no_translate", False)),
    )
    return Post(path=path, front_matter=front_matter, item=item)


def load_posts(source_dir: Path, manual: ManualTranslationLoader) -> list[Post]:
    posts = []
    for path in discover_posts(source_dir, manual):
        try:
            posts.append(load_post(path, source_dir))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.warning("无法读取文章，已跳过。", path=str(path), error=str(e))
    return posts


def write_post(out_dir: Path, post: Post, item: ContentItem) -> Path:
    """以处理后的标题与正文写出文章，保留其余 front matter 字段。"""
    target = Path(out_dir) / item.source
    target.parent.mkdir(parents=True, exist_ok=True)
    front_matter = dict(post.front_matter)
    if item.title:
        front_matter["title"] = item.title
    target.write_text(render_front_matter(front_matter, item.body), encoding="utf-8")
    return target
