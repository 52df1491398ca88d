"""HealthBuddy — Модуль конфігурації"""
from .settings import (
    HealthBuddyConfig,
    get_default_config,
    StoppingConfig,
    InterviewConfig,
    GatewayConfig,
    DEFAULT_EMERGENCY_KEYWORDS,
)
from .loader import save_config, load_config, save_yaml, load_yaml

__all__ = [
    "HealthBuddyConfig",
    "get_default_config",
    "StoppingConfig",
    "InterviewConfig",
    "GatewayConfig",
    "DEFAULT_EMERGENCY_KEYWORDS",
    "save_config",
    "load_config",
    "save_yaml",
    "load_yaml",
]
