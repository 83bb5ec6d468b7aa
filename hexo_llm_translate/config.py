# hexo_llm_translate/config.py

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hexo_llm_translate.utils import validate_lang_code

DEFAULT_MODEL = "deepseek-ai/DeepSeek-V3.2"
DEFAULT_ENDPOINT = "https://api.siliconflow.cn/v1/chat/completions"
# node_modules/.cache 在 Vercel 等平台的构建之间会被保留
DEFAULT_CACHE_FILE = Path("node_modules") / ".cache" / "ai-translate-cache.json"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["json", "console"] = "console"


class TranslateConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LLM_TRANSLATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        populate_by_name=True,
    )

    enable: bool = False
    model: str = DEFAULT_MODEL
    endpoint: str = DEFAULT_ENDPOINT
    max_concurrency: int = Field(default=2, gt=0)
    single_timeout: float = Field(default=120.0, gt=0, description="单次请求超时（秒）")
    max_retries: int = Field(default=2, ge=0)
    layout: str = "post"
    source_lang: str = "zh"
    target_lang: str = "en"
    source_dir: Path = Path("source")
    cache_file: Path = DEFAULT_CACHE_FILE

    api_key: Optional[SecretStr] = Field(default=None, validation_alias="LLM_API_KEY")
    database_url: Optional[str] = Field(default=None, validation_alias="DATABASE_URL")
    database_ssl: Optional[str] = "require"

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("source_lang", "target_lang")
    @classmethod
    def _normalize_lang(cls, v: str) -> str:
        return validate_lang_code(v)

    @field_validator("endpoint")
    @classmethod
    def _validate_endpoint(cls, v: str) -> str:
        if not v.strip():
            return DEFAULT_ENDPOINT
        return v.strip()

    @property
    def has_credentials(self) -> bool:
        return self.api_key is not None and bool(self.api_key.get_secret_value())

    @property
    def remote_enabled(self) -> bool:
        return bool(self.database_url)
