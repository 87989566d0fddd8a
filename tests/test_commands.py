import asyncio
import io
import unittest
from contextlib import redirect_stderr, redirect_stdout

from pydyslink import commands
from pydyslink.commands import (
    ANY_ARGS,
    COMMANDS,
    Arity,
    ArityKind,
    at_least,
    check_arity,
    exactly,
    get_command,
    usage_text,
)
from pydyslink.exceptions import *
from pydyslink.models import (
    EnvironmentState,
    FanState,
    MessageCallback,
    ProductState,
    fahrenheit_to_device_temp,
)


class FakeClient:
    def __init__(self):
        self.messages = asyncio.Queue()
        self.states = []
        self.requests = 0
        self.bootstrapped = None

    async def set_state(self, state):
        self.states.append(state)

    async def request_current_state(self):
        self.requests += 1

    async def wifi_bootstrap(self, ssid, key):
        self.bootstrapped = (ssid, key)


class TestStateCommands(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.client = FakeClient()

    async def test_set_speed(self):
        await commands.set_speed(self.client, ["5"])

        self.assertEqual(self.client.states, [FanState(fan_speed="0005")])

    async def test_set_speed_accepts_range_limits(self):
        await commands.set_speed(self.client, ["1"])
        await commands.set_speed(self.client, ["10"])

        self.assertEqual(
            self.client.states, [FanState(fan_speed="0001"), FanState(fan_speed="0010")]
        )

    async def test_set_speed_out_of_range_is_rejected_before_sending(self):
        for speed in ["0", "11", "-1", "100"]:
            with self.assertRaises(InvalidArgumentException):
                await commands.set_speed(self.client, [speed])

        self.assertEqual(self.client.states, [])

    async def test_set_speed_that_is_not_a_number_is_rejected(self):
        for speed in ["fast", "1_0", " 5", "5 ", "\u0665", "5.0", ""]:
            with self.subTest(speed=speed), self.assertRaises(InvalidArgumentException):
                await commands.set_speed(self.client, [speed])

        self.assertEqual(self.client.states, [])

    async def test_set_fan_mode(self):
        for mode in ["FAN", "OFF", "AUTO"]:
            await commands.set_fan_mode(self.client, [mode])

        self.assertEqual(
            self.client.states,
            [FanState(fan_mode="FAN"), FanState(fan_mode="OFF"), FanState(fan_mode="AUTO")],
        )

    async def test_invalid_enumerated_values_are_rejected(self):
        cases = [
            (commands.set_fan_mode, "ON"),
            (commands.set_fan_mode, "fan"),
            (commands.set_oscillate, "YES"),
            (commands.set_oscillate, "on"),
            (commands.set_monitor, "TRUE"),
            (commands.set_focused_mode, ""),
        ]
        for handler, value in cases:
            with self.subTest(handler=handler.__name__, value=value):
                with self.assertRaises(InvalidArgumentException) as cm:
                    await handler(self.client, [value])
                self.assertIn("Invalid", str(cm.exception))

        self.assertEqual(self.client.states, [])

    async def test_toggle_commands_set_only_their_field(self):
        await commands.set_oscillate(self.client, ["ON"])
        await commands.set_monitor(self.client, ["OFF"])
        await commands.set_focused_mode(self.client, ["ON"])

        self.assertEqual(
            self.client.states,
            [
                FanState(oscillate="ON"),
                FanState(standby_monitoring="OFF"),
                FanState(focused_mode="ON"),
            ],
        )

    async def test_set_temp_zero_turns_heat_off_without_target(self):
        await commands.set_temp(self.client, ["0"])

        self.assertEqual(self.client.states, [FanState(heat_mode="OFF")])
        self.assertIsNone(self.client.states[0].heat_target)

    async def test_set_temp_converts_fahrenheit_and_turns_heat_on(self):
        await commands.set_temp(self.client, ["68"])

        self.assertEqual(
            self.client.states,
            [FanState(heat_mode="HEAT", heat_target=f"{fahrenheit_to_device_temp(68):04d}")],
        )

    async def test_set_temp_range_limits(self):
        await commands.set_temp(self.client, ["33"])
        await commands.set_temp(self.client, ["99"])

        self.assertEqual(
            [state.heat_target for state in self.client.states], ["2737", "3104"]
        )

    async def test_set_temp_out_of_range_is_rejected(self):
        for temp in ["1", "32", "100", "-5", "warm", "6_8", " 68", "\u0666\u0668"]:
            with self.assertRaises(InvalidArgumentException):
                await commands.set_temp(self.client, [temp])

        self.assertEqual(self.client.states, [])

    async def test_reset_filter(self):
        await commands.reset_filter(self.client, [])

        self.assertEqual(self.client.states, [FanState(reset_filter="RSTF")])

    async def test_bootstrap(self):
        await commands.bootstrap(self.client, ["--ssid", "home", "--key", "secret"])

        self.assertEqual(self.client.bootstrapped, ("home", "secret"))

    async def test_bootstrap_without_key_is_a_flag_error(self):
        with self.assertRaises(FlagError) as cm:
            await commands.bootstrap(self.client, ["--ssid", "home"])

        self.assertEqual(cm.exception.exit_code, 2)
        self.assertIn("--key", cm.exception.usage)
        self.assertIsNone(self.client.bootstrapped)

    async def test_bootstrap_with_unknown_flag_is_a_flag_error(self):
        with self.assertRaises(FlagError) as cm:
            await commands.bootstrap(self.client, ["--bogus", "x"])

        self.assertEqual(cm.exception.exit_code, 2)


class TestQueryCommands(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.client = FakeClient()

    async def test_get_current_state_reads_exactly_two_messages(self):
        self.client.messages.put_nowait(MessageCallback(message=ProductState(fan_mode="FAN")))
        self.client.messages.put_nowait(MessageCallback(message=EnvironmentState(humidity="40")))
        self.client.messages.put_nowait(MessageCallback(message=ProductState(fan_mode="OFF")))

        out = io.StringIO()
        with redirect_stdout(out):
            await commands.get_current_state(self.client, [])

        self.assertEqual(self.client.requests, 1)
        self.assertEqual(self.client.messages.qsize(), 1)
        self.assertIn("Product State:", out.getvalue())
        self.assertIn("FanMode: FAN", out.getvalue())
        self.assertIn("Humidity: 40%", out.getvalue())
        self.assertNotIn("FanMode: OFF", out.getvalue())

    async def test_get_current_state_stops_at_first_error(self):
        self.client.messages.put_nowait(
            MessageCallback(error=DeviceMessageException("Malformed message"))
        )
        self.client.messages.put_nowait(MessageCallback(message=ProductState(fan_mode="FAN")))

        out = io.StringIO()
        with redirect_stdout(out), self.assertRaises(DeviceMessageException):
            await commands.get_current_state(self.client, [])

        self.assertEqual(self.client.messages.qsize(), 1)
        self.assertEqual(out.getvalue(), "")

    async def test_monitor_renders_messages_and_continues_after_errors(self):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err), self.assertLogs(
            "pydyslink.commands", level="ERROR"
        ) as logs:
            task = asyncio.ensure_future(commands.monitor(self.client, [], interval=0.01))
            self.client.messages.put_nowait(
                MessageCallback(error=DeviceMessageException("Malformed message"))
            )
            self.client.messages.put_nowait(
                MessageCallback(message=ProductState(fan_mode="AUTO"))
            )
            await asyncio.sleep(0.1)
            task.cancel()
            with self.assertRaises(asyncio.CancelledError):
                await task

        self.assertIn("error: Malformed message", err.getvalue())
        self.assertIn("Receive error: Malformed message", logs.output[0])
        self.assertIn("FanMode: AUTO", out.getvalue())
        self.assertGreater(self.client.requests, 0)
        self.assertEqual(self.client.messages.qsize(), 0)


class TestRegistry(unittest.TestCase):
    def test_get_command(self):
        self.assertIs(get_command("set-speed"), COMMANDS["set-speed"])

    def test_get_unknown_command(self):
        with self.assertRaises(InvalidCommandError):
            get_command("fly")

    def test_arity(self):
        self.assertTrue(exactly(1).accepts(1))
        self.assertTrue(exactly(1).accepts(2))
        self.assertFalse(exactly(1).accepts(0))
        self.assertTrue(at_least(2).accepts(3))
        self.assertFalse(at_least(2).accepts(1))
        self.assertTrue(ANY_ARGS.accepts(0))
        self.assertEqual(ANY_ARGS, Arity(ArityKind.ANY, 0))

    def test_check_arity_rejects_missing_argument(self):
        with self.assertRaises(InvalidArgumentException) as cm:
            check_arity("set-speed", COMMANDS["set-speed"], [])

        self.assertIn("set-speed", str(cm.exception))

    def test_command_table(self):
        self.assertEqual(
            sorted(COMMANDS),
            [
                "bootstrap",
                "discover",
                "get-current-state",
                "monitor",
                "reset-filter",
                "set-fan-mode",
                "set-focused-mode",
                "set-monitor",
                "set-oscillate",
                "set-speed",
                "set-temp",
            ],
        )
        self.assertFalse(COMMANDS["discover"].connect)
        self.assertEqual(COMMANDS["bootstrap"].arity.kind, ArityKind.ANY)
        self.assertTrue(all(c.connect for n, c in COMMANDS.items() if n != "discover"))

    def test_usage_lists_commands_sorted(self):
        lines = usage_text().splitlines()

        self.assertEqual(lines[0], "Available commands:")
        self.assertTrue(lines[1].strip().startswith("bootstrap"))
        self.assertIn("Set fan speed", usage_text())
