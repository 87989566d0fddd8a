from typing import Any, Dict, List, NamedTuple, Optional, Union

from enum import Enum

from .constants import *


TEMP_FAHRENHEIT: str = "°F"


class FanMode(str, Enum):
    ON = "FAN"
    OFF = "OFF"
    AUTO = "AUTO"


class Toggle(str, Enum):
    ON = "ON"
    OFF = "OFF"


class HeatMode(str, Enum):
    HEAT = "HEAT"
    OFF = "OFF"


def fahrenheit_to_device_temp(fahrenheit: int) -> int:
    """Device temperatures are tenths of a kelvin."""
    return round(((fahrenheit - 32) * 5 / 9 + 273.15) * 10)


def device_temp_to_fahrenheit(value: int) -> int:
    return round((value / 10 - 273.15) * 9 / 5 + 32)


class FanState(NamedTuple):
    fan_mode: Optional[str] = None
    fan_speed: Optional[str] = None
    oscillate: Optional[str] = None
    standby_monitoring: Optional[str] = None
    focused_mode: Optional[str] = None
    heat_mode: Optional[str] = None
    heat_target: Optional[str] = None
    reset_filter: Optional[str] = None
    quality_target: Optional[str] = None
    night_mode: Optional[str] = None

    def to_data(self) -> Dict[str, str]:
        data = {}
        for name, value in self._asdict().items():
            if value is None:
                continue
            data[_FAN_STATE_FIELDS[name]] = str(value.value if isinstance(value, Enum) else value)
        return data


_FAN_STATE_FIELDS: Dict[str, str] = {
    "fan_mode": FIELD_FAN_MODE,
    "fan_speed": FIELD_FAN_SPEED,
    "oscillate": FIELD_OSCILLATE,
    "standby_monitoring": FIELD_STANDBY_MONITORING,
    "focused_mode": FIELD_FOCUSED_MODE,
    "heat_mode": FIELD_HEAT_MODE,
    "heat_target": FIELD_HEAT_TARGET,
    "reset_filter": FIELD_RESET_FILTER,
    "quality_target": FIELD_QUALITY_TARGET,
    "night_mode": FIELD_NIGHT_MODE,
}


def _latest(value: Any) -> str:
    # STATE-CHANGE reports [previous, current]
    if isinstance(value, list):
        value = value[-1] if value else ""
    return "" if value is None else str(value)


def _from_data(cls, fields: Dict[str, str], data: Dict[str, Any]):
    return cls(**{name: _latest(data.get(code)) for name, code in fields.items()})


class ProductState(NamedTuple):
    fan_mode: str = ""
    fan_state: str = ""
    fan_speed: str = ""
    quality_target: str = ""
    oscillate: str = ""
    filter_life: str = ""
    error_code: str = ""
    warning_code: str = ""
    night_mode: str = ""
    standby_monitoring: str = ""
    heat_mode: str = ""
    heat_state: str = ""
    heat_target: str = ""
    focused_mode: str = ""
    tilt: str = ""
    sleep_timer: str = ""

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "ProductState":
        return _from_data(cls, _PRODUCT_STATE_FIELDS, data)


_PRODUCT_STATE_FIELDS: Dict[str, str] = {
    "fan_mode": FIELD_FAN_MODE,
    "fan_state": FIELD_FAN_STATE,
    "fan_speed": FIELD_FAN_SPEED,
    "quality_target": FIELD_QUALITY_TARGET,
    "oscillate": FIELD_OSCILLATE,
    "filter_life": FIELD_FILTER_LIFE,
    "error_code": FIELD_ERROR_CODE,
    "warning_code": FIELD_WARNING_CODE,
    "night_mode": FIELD_NIGHT_MODE,
    "standby_monitoring": FIELD_STANDBY_MONITORING,
    "heat_mode": FIELD_HEAT_MODE,
    "heat_state": FIELD_HEAT_STATE,
    "heat_target": FIELD_HEAT_TARGET,
    "focused_mode": FIELD_FOCUSED_MODE,
    "tilt": FIELD_TILT,
    "sleep_timer": FIELD_SLEEP_TIMER,
}


class EnvironmentState(NamedTuple):
    temperature: str = ""
    humidity: str = ""
    particle: str = ""
    voc: str = ""
    sleep_timer: str = ""

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "EnvironmentState":
        return _from_data(cls, _ENVIRONMENT_STATE_FIELDS, data)


_ENVIRONMENT_STATE_FIELDS: Dict[str, str] = {
    "temperature": FIELD_TEMPERATURE,
    "humidity": FIELD_HUMIDITY,
    "particle": FIELD_PARTICLE,
    "voc": FIELD_VOC,
    "sleep_timer": FIELD_SLEEP_TIMER,
}


class DeviceMessage(NamedTuple):
    msg: str
    fields: Dict[str, Any]


Message = Union[ProductState, EnvironmentState, DeviceMessage]


class MessageCallback(NamedTuple):
    message: Optional[Message] = None
    error: Optional[Exception] = None


class ServiceRecord(NamedTuple):
    name: str
    host: str
    addresses_v4: List[str]
    addresses_v6: List[str]
    port: int


class Config(NamedTuple):
    address: str = ""
    user: str = ""
    password: str = ""
    model: str = ""
    debug: bool = False
