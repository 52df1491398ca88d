"""HealthBuddy — Завантаження конфігурації"""
import yaml
from pathlib import Path
from dataclasses import asdict
from .settings import HealthBuddyConfig


def save_yaml(config: HealthBuddyConfig, path: str) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(asdict(config), f, default_flow_style=False, allow_unicode=True)


def load_yaml(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def save_config(config: HealthBuddyConfig, path: str) -> None:
    save_yaml(config, path)


def load_config(path: str) -> HealthBuddyConfig:
    return HealthBuddyConfig.from_dict(load_yaml(path))
