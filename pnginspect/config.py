# config.py

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml

from pnginspect.log import get_logger

logger = get_logger(__name__)

# Определение путей к файлу конфигурации
CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
CONFIG_FILE = CONFIG_DIR / "inspector.yaml"


# Загрузка файла конфигурации
# Явно указанный, но отсутствующий файл - ошибка; отсутствие файла по умолчанию - пустой конфиг
def load_cfg(path: Optional[str] = None) -> dict:
    if path is not None:
        cfg_path = Path(path)
        if not cfg_path.is_file():
            raise FileNotFoundError(f"inspector.yaml not found at: {cfg_path}")
    else:
        cfg_path = CONFIG_FILE
        if not cfg_path.is_file():
            logger.debug("default config not found at %s, using built-in defaults", cfg_path)
            return {}
    with cfg_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping: {cfg_path}")
    return data


# Безопасное чтение вложенных ключей: cfg['a']['b']['c'] по строке 'a.b.c'
def cfg_get(cfg: Optional[dict], path: str, default: Any = None) -> Any:
    cur: Any = cfg or {}
    for k in path.split("."):
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return default if cur is None else cur


__all__ = ["CONFIG_DIR", "CONFIG_FILE", "load_cfg", "cfg_get"]
