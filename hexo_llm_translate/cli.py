# hexo_llm_translate/cli.py
"""
命令行入口。

在站点生成前对 ``source/_posts`` 中的文章做一次预处理翻译，
并输出需要注入到主题模板中的片段。
"""

import asyncio
from collections import Counter
from pathlib import Path
from typing import Annotated, Optional

import structlog
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from hexo_llm_translate import __version__
from hexo_llm_translate.config import TranslateConfig
from hexo_llm_translate.config_loader import load_config
from hexo_llm_translate.exceptions import ConfigurationError
from hexo_llm_translate.injector import build_injections
from hexo_llm_translate.logging_config import setup_logging
from hexo_llm_translate.manual import ManualTranslationLoader
from hexo_llm_translate.pipeline import TranslationPipeline
from hexo_llm_translate.posts import load_posts, write_post
from hexo_llm_translate.storage import CacheStore
from hexo_llm_translate.types import TranslationOutcome

app = typer.Typer(
    name="hexo-llm-translate",
    help="为静态站点文章生成机器翻译的双语版本。",
    add_completion=False,
    no_args_is_help=True,
)
cache_app = typer.Typer(help="查看翻译缓存。")
app.add_typer(cache_app, name="cache")

console = Console()
log = structlog.get_logger("hexo_llm_translate.cli")

ConfigOption = Annotated[
    Path, typer.Option("--config", "-c", help="站点配置文件（读取 llm_translation 小节）。")
]


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"hexo-llm-translate version: [bold green]{__version__}[/bold green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version", "-V", help="显示版本号并退出。", is_eager=True,
            callback=_version_callback,
        ),
    ] = None,
) -> None:
    """hexo-llm-translate 命令行工具。"""


def _load(config_path: Path) -> TranslateConfig:
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        console.print(f"[bold red]❌ {escape(str(e))}[/bold red]")
        raise typer.Exit(code=1) from e
    setup_logging(config.logging.level, config.logging.format)
    return config


async def _translate_posts(
    config: TranslateConfig, out_dir: Path
) -> list[TranslationOutcome]:
    manual = ManualTranslationLoader(config.source_dir, config.target_lang)
    posts = load_posts(config.source_dir, manual)
    log.info("开始处理文章。", count=len(posts), source_dir=str(config.source_dir))

    async with TranslationPipeline(config) as pipeline:
        outcomes = await pipeline.process_all(post.item for post in posts)
        for post, outcome in zip(posts, outcomes):
            write_post(out_dir, post, outcome.item)
        injections = pipeline.injections()

    out_dir.mkdir(parents=True, exist_ok=True)
    (out_dir / "_injections.html").write_text(
        "\n".join(f"<!-- {name} -->\n{html}" for name, html in injections.items()),
        encoding="utf-8",
    )
    return outcomes


@app.command("translate")
def translate(
    config_path: ConfigOption = Path("_config.yml"),
    out_dir: Annotated[
        Path, typer.Option("--out", "-o", help="处理后文章的输出目录。")
    ] = Path("build/translated"),
) -> None:
    """翻译 source/_posts 下的全部文章并写入输出目录。"""
    config = _load(config_path)
    outcomes = asyncio.run(_translate_posts(config, out_dir))

    counts = Counter(outcome.state.value for outcome in outcomes)
    table = Table(title="翻译结果")
    table.add_column("状态", style="cyan")
    table.add_column("数量", justify="right")
    for state, count in sorted(counts.items()):
        table.add_row(state, str(count))
    console.print(table)


@cache_app.command("list")
def cache_list(config_path: ConfigOption = Path("_config.yml")) -> None:
    """列出本地缓存文件中的全部翻译记录。"""
    config = _load(config_path)
    records = CacheStore(config.cache_file).records()
    if not records:
        console.print("[yellow]缓存为空。[/yellow]")
        return

    table = Table(title=str(config.cache_file))
    table.add_column("源文件", style="cyan")
    table.add_column("模型", style="dim")
    table.add_column("原文标题")
    table.add_column("译文标题", style="green")
    for key, record in sorted(records.items()):
        table.add_row(key, record.model, record.original_title or "-", record.translated_title)
    console.print(table)


@app.command("inject")
def inject(config_path: ConfigOption = Path("_config.yml")) -> None:
    """打印需要注入到主题中的 CSS 与脚本（标题对取自本地缓存）。"""
    config = _load(config_path)
    records = CacheStore(config.cache_file).records()
    for name, html in build_injections(
        [], records, config.source_lang, config.target_lang
    ).items():
        console.print(f"<!-- {name} -->", style="dim", highlight=False)
        console.print(html, markup=False, highlight=False, soft_wrap=True)


if __name__ == "__main__":
    app()
