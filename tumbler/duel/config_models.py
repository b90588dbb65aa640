from __future__ import annotations

from pathlib import Path
from typing import Optional

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tumbler.duel import CONFIG_PATH

logger = structlog.get_logger(__name__)


# =============================================================================
# DuelConfig (args/duel.yaml)
# =============================================================================

class DuelConfig(BaseModel):
    """Duel settings.

    Keys may be written in snake_case or in the camelCase used by the
    app's settings panel (``enableWeightClasses``, ``duelWinBoost``, ...).
    """

    model_config = ConfigDict(extra="allow", alias_generator=to_camel, populate_by_name=True)

    enable_weight_classes: bool = Field(default=True)
    weight_class_tolerance: int = Field(default=10, ge=0)
    duel_win_boost: int = Field(default=10, ge=0)
    duel_loss_penalty: int = Field(default=5, ge=0)
    weight_max: int = Field(default=100, ge=1)
    duel_auto_advance: bool = Field(default=True)
    sound: bool = Field(default=True)
    confetti: bool = Field(default=False)

    # Round timing, milliseconds from the moment a fighter is chosen
    clash_ms: int = Field(default=300, ge=0)
    settle_ms: int = Field(default=900, ge=0)
    particle_delay_ms: int = Field(default=200, ge=0)
    xp_display_ms: int = Field(default=2500, ge=0)

    viewport_height: float = Field(default=1000.0, gt=0)


class DuelConfigFile(BaseModel):
    model_config = ConfigDict(extra="allow")
    duel: DuelConfig = Field(default_factory=DuelConfig)


def load_config(path: Optional[Path] = None) -> DuelConfig:
    """Load duel settings from YAML, falling back to defaults on any error."""
    yaml_path = path or CONFIG_PATH

    try:
        if yaml_path.exists():
            with open(yaml_path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}

        return DuelConfigFile.model_validate(raw).duel
    except Exception as e:
        logger.warning("duel.config_invalid", path=str(yaml_path), error=str(e))
        return DuelConfig()


__all__ = ["DuelConfig", "DuelConfigFile", "load_config"]
