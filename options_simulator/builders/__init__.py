"""Strategy templates and classification."""

from .strategy_templates import (
    STRATEGY_TEMPLATES,
    StrategyTemplate,
    TemplateLeg,
    build_from_template,
    detect_strategy_type,
)

__all__ = [
    "STRATEGY_TEMPLATES",
    "StrategyTemplate",
    "TemplateLeg",
    "build_from_template",
    "detect_strategy_type",
]
