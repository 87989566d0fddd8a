import argparse
import asyncio
import logging
import re
import sys
from enum import Enum
from typing import Awaitable, Callable, Dict, List, NamedTuple, Optional, Type

from .client import DysonClient
from .constants import *
from .discovery import discover as discover_services, format_record
from .exceptions import *
from .models import FanMode, FanState, HeatMode, ServiceRecord, Toggle, fahrenheit_to_device_temp
from .render import render

_LOGGER = logging.getLogger(__name__)

_INTEGER = re.compile(r"[+-]?[0-9]+")


class CommandParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting, so exit codes stay in one place."""

    def __init__(self, *args, error_class: Type[UsageError] = UsageError, **kwargs):
        super().__init__(*args, **kwargs)
        self.error_class = error_class

    def error(self, message):
        raise self.error_class(message, usage=self.format_help())


class ArityKind(str, Enum):
    EXACT = "exact"
    AT_LEAST = "at_least"
    ANY = "any"


class Arity(NamedTuple):
    kind: ArityKind
    count: int = 0

    def accepts(self, nargs: int) -> bool:
        if self.kind == ArityKind.ANY:
            return True
        # Extra arguments are ignored
        return nargs >= self.count


def exactly(count: int) -> Arity:
    return Arity(ArityKind.EXACT, count)


def at_least(count: int) -> Arity:
    return Arity(ArityKind.AT_LEAST, count)


ANY_ARGS = Arity(ArityKind.ANY)

Handler = Callable[[Optional[DysonClient], List[str]], Awaitable[None]]


class Command(NamedTuple):
    handler: Handler
    info: str
    arity: Arity
    connect: bool


def _choice(value: str, choices: Type[Enum], what: str) -> str:
    try:
        return choices(value).value
    except ValueError:
        legal = ", ".join(c.value for c in choices)
        raise InvalidArgumentException(f"Invalid {what} {value} (expected one of {legal})") from None


def _integer(value: str, what: str) -> int:
    # ASCII digits with an optional sign
    if not _INTEGER.fullmatch(value):
        raise InvalidArgumentException(f"Invalid {what} {value}")
    return int(value)


async def bootstrap(client: DysonClient, args: List[str]) -> None:
    parser = CommandParser(
        prog="dyslink bootstrap",
        usage="%(prog)s [flags]",
        description="Join the device to a wireless network",
        error_class=FlagError,
    )
    parser.add_argument("--ssid", type=str, dest="ssid", help="SSID [required]", default="")
    parser.add_argument("--key", type=str, dest="key", help="Wireless password [required]", default="")
    options = parser.parse_args(args)
    if not options.ssid or not options.key:
        raise FlagError("Must supply ssid and key", usage=parser.format_help())

    await client.wifi_bootstrap(options.ssid, options.key)


async def reset_filter(client: DysonClient, args: List[str]) -> None:
    await client.set_state(FanState(reset_filter=RESET_FILTER))


async def set_fan_mode(client: DysonClient, args: List[str]) -> None:
    mode = _choice(args[0], FanMode, "fan mode")
    await client.set_state(FanState(fan_mode=mode))


async def set_speed(client: DysonClient, args: List[str]) -> None:
    speed = _integer(args[0], "fan speed")
    if not FAN_SPEED_MIN <= speed <= FAN_SPEED_MAX:
        raise InvalidArgumentException(f"Invalid fan speed {args[0]}")
    await client.set_state(FanState(fan_speed=f"{speed:04d}"))


async def set_oscillate(client: DysonClient, args: List[str]) -> None:
    state = _choice(args[0], Toggle, "oscillation state")
    await client.set_state(FanState(oscillate=state))


async def set_monitor(client: DysonClient, args: List[str]) -> None:
    state = _choice(args[0], Toggle, "monitor state")
    await client.set_state(FanState(standby_monitoring=state))


async def set_focused_mode(client: DysonClient, args: List[str]) -> None:
    mode = _choice(args[0], Toggle, "focused mode")
    await client.set_state(FanState(focused_mode=mode))


async def set_temp(client: DysonClient, args: List[str]) -> None:
    """Temperature is given in Fahrenheit; 0 turns heating off."""
    temp = _integer(args[0], "fan temp")
    if temp == HEAT_OFF_TEMP:
        await client.set_state(FanState(heat_mode=HeatMode.OFF.value))
        return
    if not HEAT_TEMP_MIN_F <= temp <= HEAT_TEMP_MAX_F:
        raise InvalidArgumentException(f"Invalid fan temp {args[0]}")
    await client.set_state(
        FanState(
            heat_mode=HeatMode.HEAT.value,
            heat_target=f"{fahrenheit_to_device_temp(temp):04d}",
        )
    )


async def get_current_state(client: DysonClient, args: List[str]) -> None:
    await client.request_current_state()
    # One product state and one environment state
    for _ in range(2):
        callback = await client.messages.get()
        if callback.error is not None:
            raise callback.error
        print(render(callback.message))
        print()


async def monitor(client: DysonClient, args: List[str], interval: float = MONITOR_INTERVAL) -> None:
    async def poll() -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await client.request_current_state()
            except DysLinkException as e:
                _LOGGER.warning("State request failed: %s", e)

    poller = asyncio.ensure_future(poll())
    try:
        while True:
            callback = await client.messages.get()
            if callback.error is not None:
                _LOGGER.error("Receive error: %s", callback.error)
                print("error:", callback.error, file=sys.stderr)
                print(file=sys.stderr)
                continue
            print(render(callback.message))
            print()
    finally:
        poller.cancel()


async def discover(client: Optional[DysonClient], args: List[str]) -> None:
    def print_record(record: ServiceRecord) -> None:
        for line in format_record(record):
            print(line)

    await discover_services(print_record)


COMMANDS: Dict[str, Command] = {
    "discover": Command(discover, "Find all Dyson Purifiers", exactly(0), False),
    "bootstrap": Command(bootstrap, "Bootstrap a new device", ANY_ARGS, True),
    "set-fan-mode": Command(set_fan_mode, "Set the mode of the fan", exactly(1), True),
    "set-speed": Command(set_speed, "Set fan speed", exactly(1), True),
    "set-oscillate": Command(set_oscillate, "Toggle oscillation", exactly(1), True),
    "set-monitor": Command(set_monitor, "Toggle standby monitoring", exactly(1), True),
    "set-temp": Command(set_temp, "Set temperature", exactly(1), True),
    "set-focused-mode": Command(set_focused_mode, "Set focused mode", exactly(1), True),
    "get-current-state": Command(
        get_current_state, "Request the current state from the device", exactly(0), True
    ),
    "monitor": Command(monitor, "Monitor all messages", exactly(0), True),
    "reset-filter": Command(reset_filter, "Request reset of the filter life", exactly(0), True),
}


def get_command(name: str) -> Command:
    try:
        return COMMANDS[name]
    except KeyError:
        raise InvalidCommandError(f"Invalid command {name}") from None


def check_arity(name: str, command: Command, args: List[str]) -> None:
    if not command.arity.accepts(len(args)):
        raise InvalidArgumentException(
            f"Invalid number of arguments to {name} needs {command.arity.count}"
        )


def usage_text() -> str:
    width = max(len(name) for name in COMMANDS) + 2
    lines = ["Available commands:"]
    for name in sorted(COMMANDS):
        lines.append(f"  {name.ljust(width)}{COMMANDS[name].info}")
    return "\n".join(lines)
