"""Simple JSON-backed configuration store."""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from core.settings import API, CONFIG_PATH, TIMER
from models.focus_session import TIMER_STRATEGIES


@dataclass
class AppConfig:
    """User preferences persisted to ``config.json``."""

    api_base_url: str = API.base_url
    timer_strategy: str = TIMER.default_strategy
    custom_preset: str = TIMER.default_custom_preset
    last_task_id: Optional[int] = None


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _load_raw(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def load_config(path: Optional[Path] = None) -> AppConfig:
    target = path or CONFIG_PATH
    data = _load_raw(target)
    defaults = AppConfig()
    strategy = data.get("timer_strategy") or defaults.timer_strategy
    if strategy not in TIMER_STRATEGIES:
        strategy = defaults.timer_strategy
    preset = data.get("custom_preset") or defaults.custom_preset
    if preset not in TIMER.custom_presets:
        preset = defaults.custom_preset
    last_task_id = data.get("last_task_id")
    return AppConfig(
        api_base_url=data.get("api_base_url") or defaults.api_base_url,
        timer_strategy=strategy,
        custom_preset=preset,
        last_task_id=last_task_id if isinstance(last_task_id, int) else None,
    )


def save_config(config: AppConfig, path: Optional[Path] = None) -> None:
    target = path or CONFIG_PATH
    _ensure_parent(target)
    payload = json.dumps(asdict(config), ensure_ascii=False, indent=2, sort_keys=True)
    tmp = target.with_suffix(".tmp")
    try:
        tmp.write_text(payload, encoding="utf-8")
        tmp.replace(target)
    finally:
        if tmp.exists():
            try:
                tmp.unlink()
            except OSError:
                pass


def update_config(path: Optional[Path] = None, **changes: Any) -> AppConfig:
    target = path or CONFIG_PATH
    cfg = load_config(target)
    for key, value in changes.items():
        if hasattr(cfg, key):
            setattr(cfg, key, value)
    save_config(cfg, target)
    return cfg


__all__ = ["AppConfig", "load_config", "save_config", "update_config"]
