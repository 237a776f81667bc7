"""Configuration loader for feed-ingest."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from feed_ingest.common.config import ConfigSingleton, find_config_path, load_yaml
from feed_ingest.errors import ConfigError
from feed_ingest.fetch_feeds.proxy import DEFAULT_PROXY_URL
from feed_ingest.models import Source

CONFIG_DIR = Path(__file__).parent / "configs"
CONFIG_ENV_VAR = "FEED_INGEST_CONFIG"
DEFAULT_SUMMARIZE_URL = "https://api-inference.huggingface.co/models/facebook/bart-large-cnn"


@dataclass
class FetchConfig:
    timeout: float = 20.0
    max_attempts: int = 3
    backoff_base: float = 0.8
    app_url: str = "http://localhost:3000"
    proxy_url: str = DEFAULT_PROXY_URL


@dataclass
class PipelineConfig:
    source_delay: float = 1.2
    excerpt_length: int = 150
    run_deadline_seconds: Optional[float] = None


@dataclass
class SummarizeConfig:
    enabled: bool = False
    min_length: int = 100
    delay: float = 1.5
    model_url: str = DEFAULT_SUMMARIZE_URL
    max_input_chars: int = 1500
    timeout: float = 30.0


@dataclass
class StateConfig:
    backend: str = "memory"  # "memory" or "postgres"


@dataclass
class Config:
    fetch: FetchConfig = field(default_factory=FetchConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    summarize: SummarizeConfig = field(default_factory=SummarizeConfig)
    state: StateConfig = field(default_factory=StateConfig)
    sources: list[Source] = field(default_factory=list)


def load_config(config_name: str | None = None) -> Config:
    """Load configuration from a bundled YAML file or an explicit path.

    Args:
        config_name: Name of a bundled config (without .yaml), a path to a
                    YAML file, or None to use FEED_INGEST_CONFIG / "prod".

    Returns:
        Loaded Config object
    """
    path = find_config_path(config_name, CONFIG_DIR, default_name="prod", env_var=CONFIG_ENV_VAR)
    return parse_config(load_yaml(path))


def _parse_sources(raw: list | None) -> list[Source]:
    sources = []
    for index, entry in enumerate(raw or []):
        if not isinstance(entry, dict):
            raise ConfigError(f"Source #{index} must be a mapping with 'name' and 'url'")
        name = str(entry.get("name") or "").strip()
        url = str(entry.get("url") or "").strip()
        if not name or not url:
            raise ConfigError(f"Source #{index} is missing 'name' or 'url'")
        sources.append(Source(url=url, name=name))
    return sources


def _optional_float(value) -> Optional[float]:
    return None if value is None else float(value)


def parse_config(data: dict) -> Config:
    """Parse config dictionary into Config object."""
    fetch = data.get("fetch", {}) or {}
    pipeline = data.get("pipeline", {}) or {}
    summarize = data.get("summarize", {}) or {}
    state = data.get("state", {}) or {}

    backend = state.get("backend", "memory")
    if backend not in ("memory", "postgres"):
        raise ConfigError(f"Unknown state backend: {backend}")

    return Config(
        fetch=FetchConfig(
            timeout=float(fetch.get("timeout", 20.0)),
            max_attempts=int(fetch.get("max_attempts", 3)),
            backoff_base=float(fetch.get("backoff_base", 0.8)),
            app_url=os.environ.get("APP_URL", fetch.get("app_url", "http://localhost:3000")),
            proxy_url=fetch.get("proxy_url", DEFAULT_PROXY_URL),
        ),
        pipeline=PipelineConfig(
            source_delay=float(pipeline.get("source_delay", 1.2)),
            excerpt_length=int(pipeline.get("excerpt_length", 150)),
            run_deadline_seconds=_optional_float(pipeline.get("run_deadline_seconds")),
        ),
        summarize=SummarizeConfig(
            enabled=bool(summarize.get("enabled", False)),
            min_length=int(summarize.get("min_length", 100)),
            delay=float(summarize.get("delay", 1.5)),
            model_url=summarize.get("model_url", DEFAULT_SUMMARIZE_URL),
            max_input_chars=int(summarize.get("max_input_chars", 1500)),
            timeout=float(summarize.get("timeout", 30.0)),
        ),
        state=StateConfig(backend=backend),
        sources=_parse_sources(data.get("sources")),
    )


_manager: ConfigSingleton[Config] = ConfigSingleton(load_config)
get_config = _manager.get
set_config = _manager.set
reset_config = _manager.reset
