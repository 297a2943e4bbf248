"""Soft checks on the raw configuration that warn instead of failing."""

import warnings
from typing import Any, Dict, List

DEFAULT_WEIGHT_VALUES = {"skills": 0.50, "experience": 0.20, "rate": 0.15, "availability": 0.15}


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for settings that are valid but unusual.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    scoring = config_dict.get("scoring", {})
    if isinstance(scoring, dict):
        overridden = sorted(
            key for key, default in DEFAULT_WEIGHT_VALUES.items()
            if key in scoring and scoring[key] != default
        )
        if overridden:
            warning_messages.append(
                f"Scoring weights overridden ({', '.join(overridden)}); "
                "scores will differ from the standard ranking"
            )
        if scoring.get("skills") == 0:
            warning_messages.append("Skill weight is 0; skill coverage will not affect scores")

    alerts = config_dict.get("alerts", {})
    if isinstance(alerts, dict):
        max_alerts = alerts.get("max_alerts_per_talent", 10)
        if isinstance(max_alerts, int) and max_alerts > 25:
            warning_messages.append(
                f"Large max_alerts_per_talent ({max_alerts}) may slow down instant dispatch"
            )

        preview_limit = alerts.get("preview_limit")
        if isinstance(preview_limit, int):
            warning_messages.append(
                f"preview_limit={preview_limit}: preview counts can be lower than what "
                "the digests will actually send"
            )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit warning messages through the warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
