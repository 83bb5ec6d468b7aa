# tests/conftest.py
"""项目全局共享的测试 Fixtures。"""

from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
import structlog
from pytest_mock import MockerFixture
from rich.console import Console

from hexo_llm_translate.config import TranslateConfig
from tests.helpers.factories import create_config


@pytest.fixture(scope="session", autouse=True)
def disable_rich_colors_for_tests(
    session_mocker: MockerFixture,
) -> Generator[None, None, None]:
    """全局禁用 rich 库的颜色输出，以确保测试结果的确定性。"""
    original_init = Console.__init__

    def new_init(self: Console, *args: Any, **kwargs: Any) -> None:
        kwargs["force_terminal"] = False
        kwargs["color_system"] = None
        original_init(self, *args, **kwargs)

    session_mocker.patch("rich.console.Console.__init__", new=new_init)
    yield


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """每个测试结束后恢复 structlog 的默认配置，避免 setup_logging 的影响扩散。"""
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """清除可能影响配置加载的环境变量。"""
    for name in ("LLM_API_KEY", "DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config(tmp_path: Path) -> TranslateConfig:
    return create_config(tmp_path)
