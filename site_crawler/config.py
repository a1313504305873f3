# === FILE: site_crawler/config.py ===
"""
Модуль для загрузки и валидации конфигурации краулера SiteCrawler.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from site_crawler.crawler.models import Address
from site_crawler.crawler.normalizer import parse_target
from site_crawler.crawler.storage import DEFAULT_ROOT


class CrawlerConfig(BaseModel):
    """Конфигурация для одного запуска обхода."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    target: str = Field("https://example.com", description="Стартовый URL; его хост ограничивает обход.")
    duration: int = Field(5, gt=0, description="Длительность запуска (секунд).")
    workers: int = Field(2, ge=1, description="Число параллельных воркеров.")
    queue_size: int = Field(2, ge=1, description="Ёмкость очереди адресов.")
    output_dir: Path = Field(DEFAULT_ROOT, description="Корневая папка для сохранённых страниц.")
    request_timeout: Optional[float] = Field(
        None, gt=0, description="Таймаут на один запрос (секунд); None — без таймаута."
    )

    @field_validator("target")
    def _check_target(cls, v: str) -> str:
        # ConfigError is a ValueError, pydantic turns it into ValidationError
        parse_target(v)
        return v.strip()

    @property
    def seed(self) -> Address:
        return parse_target(self.target)

    @property
    def target_host(self) -> str:
        return self.seed.host


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> CrawlerConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlerConfig.
    Без пути использует configs/default.yaml, а если его нет — значения по умолчанию.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return CrawlerConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return CrawlerConfig(**data)


def with_overrides(config: CrawlerConfig, **overrides: Any) -> CrawlerConfig:
    """Возвращает новый проверенный конфиг; значения None игнорируются."""
    values = {k: v for k, v in overrides.items() if v is not None}
    if not values:
        return config
    return CrawlerConfig(**{**config.model_dump(), **values})


__all__ = ["CrawlerConfig", "ValidationError", "load_config", "with_overrides"]
