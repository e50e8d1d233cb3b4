from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

_TRUTHY = ('1', 'true', 'yes', 'on')


def _flag(name: str, default: str = '0') -> bool:
    return os.getenv(name, default).lower() in _TRUTHY


def _float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    debug: bool = False
    bot_time_scale: float = 1.0
    simulation_speed: float = 0.0
    port: int = 5000
    flask_debug: bool = False

    @classmethod
    def from_env(cls) -> 'Settings':
        return cls(
            debug=_flag('COLLAPSI_DEBUG'),
            bot_time_scale=_float('COLLAPSI_BOT_TIME_SCALE', 1.0),
            simulation_speed=_float('COLLAPSI_SIMULATION_SPEED', 0.0),
            port=int(os.getenv('PORT', '5000')),
            flask_debug=_flag('FLASK_DEBUG', os.getenv('DEBUG', '0')),
        )


def configure_logging(debug: Optional[bool] = None) -> None:
    """Entry points only; library modules just log."""
    if debug is None:
        debug = _flag('COLLAPSI_DEBUG')
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
