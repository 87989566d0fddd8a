import math
from typing import Any, Callable, List, Tuple

from .constants import FILTER_LIFE_MAX_HOURS, QUALITY_TARGETS
from .models import (
    TEMP_FAHRENHEIT,
    DeviceMessage,
    EnvironmentState,
    Message,
    ProductState,
    device_temp_to_fahrenheit,
)

UNDERLINE = "--------------"

Formatter = Callable[[str], str]


def _numeric(fmt: Callable[[int], str]) -> Formatter:
    """Wrap an integer formatter; non-numeric raw values are shown as-is."""

    def format_value(raw: str) -> str:
        try:
            value = int(raw)
        except ValueError:
            return raw
        return fmt(value)

    return format_value


def _round(value: float) -> int:
    return math.floor(value + 0.5)


format_raw: Formatter = str
format_temperature = _numeric(lambda v: f"{device_temp_to_fahrenheit(v)}{TEMP_FAHRENHEIT}")
format_percent = _numeric(lambda v: f"{v}%")
format_filter_life = _numeric(lambda v: f"{_round(v / FILTER_LIFE_MAX_HOURS * 100)}%")


def format_quality_target(raw: str) -> str:
    return QUALITY_TARGETS.get(raw, raw)


FieldRule = Tuple[str, str, Formatter]

PRODUCT_STATE_FIELDS: List[FieldRule] = [
    ("fan_mode", "FanMode", format_raw),
    ("fan_state", "FanState", format_raw),
    ("fan_speed", "FanSpeed", format_raw),
    ("quality_target", "QualityTarget", format_quality_target),
    ("oscillate", "Oscillate", format_raw),
    ("filter_life", "FilterLife", format_filter_life),
    ("error_code", "ErrorCode", format_raw),
    ("warning_code", "WarningCode", format_raw),
    ("night_mode", "NightMode", format_raw),
    ("standby_monitoring", "StandbyMonitoring", format_raw),
    ("heat_mode", "HeatMode", format_raw),
    ("heat_state", "HeatState", format_raw),
    ("heat_target", "HeatTarget", format_temperature),
    ("focused_mode", "FocusedMode", format_raw),
    ("tilt", "Tilt", format_raw),
    ("sleep_timer", "SleepTimer", format_raw),
]

ENVIRONMENT_STATE_FIELDS: List[FieldRule] = [
    ("temperature", "Temperature", format_temperature),
    ("humidity", "Humidity", format_percent),
    ("particle", "Particle", format_raw),
    ("voc", "VOC", format_raw),
    ("sleep_timer", "SleepTimer", format_raw),
]


def _render_fields(state: Any, rules: List[FieldRule]) -> List[str]:
    lines = []
    for attr, label, fmt in rules:
        raw = getattr(state, attr)
        if not raw:
            continue
        lines.append(f"{label}: {fmt(raw)}")
    return lines


def air_quality_label(estimate: int) -> str:
    if estimate <= 3:
        return "good"
    if estimate <= 6:
        return "fair"
    if estimate <= 8:
        return "poor"
    return "very poor"


def air_quality_estimate(state: EnvironmentState) -> str:
    """The worse of the VOC and particle readings, bucketed."""
    readings = []
    for raw in (state.voc, state.particle):
        try:
            readings.append(int(raw))
        except ValueError:
            readings.append(0)
    return air_quality_label(max(readings))


def render_product_state(state: ProductState) -> List[str]:
    return ["Product State:", UNDERLINE] + _render_fields(state, PRODUCT_STATE_FIELDS)


def render_environment_state(state: EnvironmentState) -> List[str]:
    lines = ["Environment State:", UNDERLINE]
    lines += _render_fields(state, ENVIRONMENT_STATE_FIELDS)
    lines.append(f"Air Quality Estimate: {air_quality_estimate(state)}")
    return lines


def render_device_message(message: DeviceMessage) -> List[str]:
    lines = [f"Message ({message.msg or 'unknown'}):", UNDERLINE]
    for key, value in message.fields.items():
        if not value:
            continue
        lines.append(f"{key}: {value}")
    return lines


def render(message: Message) -> str:
    if isinstance(message, ProductState):
        lines = render_product_state(message)
    elif isinstance(message, EnvironmentState):
        lines = render_environment_state(message)
    else:
        lines = render_device_message(message)
    return "\n".join(lines)
