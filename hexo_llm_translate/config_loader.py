# hexo_llm_translate/config_loader.py
"""
配置装载器

职责：
- 读取站点 ``_config.yml`` 中的 ``llm_translation`` 小节；
- 与环境变量 / .env 合并构造 TranslateConfig（显式配置优先于环境变量）；
- 将 pydantic 的校验错误转换为 ConfigurationError。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from hexo_llm_translate.config import TranslateConfig
from hexo_llm_translate.exceptions import ConfigurationError

__all__ = ["SECTION_NAME", "load_config"]

SECTION_NAME = "llm_translation"

logger = structlog.get_logger(__name__)


def _read_section(path: Path) -> dict[str, Any]:
    if not path.exists():
        logger.debug("站点配置文件不存在，使用默认配置与环境变量。", path=str(path))
        return {}
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"无法解析站点配置文件 '{path}': {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"站点配置文件 '{path}' 的顶层必须是映射。")

    section = raw.get(SECTION_NAME) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{SECTION_NAME}' 配置项必须是映射。")
    return section


def load_config(
    site_config: Path | str | None = "_config.yml", **overrides: Any
) -> TranslateConfig:
    """
    加载并构造配置对象。

    参数：
      - site_config: 站点配置文件路径；为 None 时只读取环境变量
      - overrides: 额外的显式配置，优先级最高
    """
    values: dict[str, Any] = {}
    if site_config is not None:
        values.update(_read_section(Path(site_config)))
    values.update(overrides)

    try:
        return TranslateConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(f"翻译插件配置无效: {e}") from e
