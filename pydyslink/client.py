import asyncio
import base64
import hashlib
import json
import logging
import time
import uuid
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlsplit

import paho.mqtt.client as mqtt

from .constants import *
from .exceptions import *
from .models import (
    Config,
    DeviceMessage,
    EnvironmentState,
    FanState,
    MessageCallback,
    ProductState,
)

_LOGGER = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Local MQTT password is the base64 SHA-512 digest of the device password."""
    digest = hashlib.sha512(password.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("utf-8")


def parse_address(address: str) -> Tuple[str, int]:
    """Accepts ``host``, ``host:port`` or ``tcp://host:port``."""
    if "://" not in address:
        address = f"tcp://{address}"
    try:
        parts = urlsplit(address)
        port = parts.port or MQTT_PORT
    except ValueError as e:
        raise InvalidArgumentException(f"Invalid address {address}") from e
    if not parts.hostname:
        raise InvalidArgumentException(f"Invalid address {address}")
    return parts.hostname, port


def parse_message(payload: bytes) -> MessageCallback:
    try:
        data = json.loads(payload)
    except (TypeError, ValueError) as e:
        return MessageCallback(error=DeviceMessageException(f"Malformed message: {e}"))
    if not isinstance(data, dict):
        return MessageCallback(error=DeviceMessageException(f"Unexpected message: {data!r}"))

    msg = data.get("msg", "")
    if msg in (MSG_CURRENT_STATE, MSG_STATE_CHANGE):
        state = data.get("product-state")
        if not isinstance(state, dict):
            return MessageCallback(error=DeviceMessageException(f"{msg} without product-state"))
        return MessageCallback(message=ProductState.from_data(state))
    if msg == MSG_ENVIRONMENTAL_SENSOR_DATA:
        state = data.get("data")
        if not isinstance(state, dict):
            return MessageCallback(error=DeviceMessageException(f"{msg} without data"))
        return MessageCallback(message=EnvironmentState.from_data(state))

    fields = {key: value for key, value in data.items() if key != "msg"}
    return MessageCallback(message=DeviceMessage(msg=msg, fields=fields))


class DysonClient:
    def __init__(
        self,
        config: Config,
        messages: Optional[asyncio.Queue] = None,
        mqtt_client: Optional[mqtt.Client] = None,
    ):
        self.config = config
        self.messages: asyncio.Queue = messages if messages is not None else asyncio.Queue()
        self.status_topic = TOPIC_STATUS.format(model=config.model, serial=config.user)
        self.command_topic = TOPIC_COMMAND.format(model=config.model, serial=config.user)

        if mqtt_client is None:
            mqtt_client = mqtt.Client(
                callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
                client_id=f"dyslink-{uuid.uuid4().hex[:8]}",
            )
        self.client = mqtt_client
        self.client.username_pw_set(config.user, hash_password(config.password))
        self.client.on_connect = self._on_connect
        self.client.on_message = self._on_message
        if config.debug:
            self.client.enable_logger(_LOGGER)

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._connected: Optional[asyncio.Future] = None

    async def connect(self, timeout: float = CONNECT_TIMEOUT) -> None:
        host, port = parse_address(self.config.address)
        self._loop = asyncio.get_running_loop()
        self._connected = self._loop.create_future()

        _LOGGER.debug("Connecting to %s:%s as %s", host, port, self.config.user)
        try:
            await self._loop.run_in_executor(
                None, self.client.connect, host, port, MQTT_KEEPALIVE
            )
        except OSError as e:
            raise ConnectionFailedException(f"Failed to connect to {host}:{port}: {e}") from e

        self.client.loop_start()
        try:
            await asyncio.wait_for(self._connected, timeout)
        except asyncio.TimeoutError as e:
            self.client.loop_stop()
            raise ConnectionFailedException(f"Timed out connecting to {host}:{port}") from e
        except ConnectionFailedException:
            self.client.loop_stop()
            raise

    def disconnect(self) -> None:
        self.client.disconnect()
        self.client.loop_stop()

    async def set_state(self, state: FanState) -> None:
        data = state.to_data()
        if not data:
            raise InvalidArgumentException("Nothing to set")
        self._publish(MSG_STATE_SET, data=data)

    async def request_current_state(self) -> None:
        self._publish(MSG_REQUEST_CURRENT_STATE)

    async def wifi_bootstrap(self, ssid: str, key: str) -> None:
        self._publish(MSG_JOIN_NETWORK, ssid=ssid, password=key)

    def _publish(self, msg: str, **fields: Any) -> None:
        payload: Dict[str, Any] = {
            "msg": msg,
            "time": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "mode-reason": MODE_REASON,
        }
        payload.update(fields)

        _LOGGER.debug("Publishing to %s: %s", self.command_topic, msg)
        info = self.client.publish(self.command_topic, json.dumps(payload), qos=1)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise ConnectionFailedException(
                f"Failed to send {msg}: {mqtt.error_string(info.rc)}"
            )

    # Called from the paho network thread

    def _on_connect(self, client, userdata, flags, reason_code, properties=None) -> None:
        if reason_code.is_failure:
            error = ConnectionFailedException(f"Connection refused: {reason_code}")
        else:
            _LOGGER.debug("Connected, subscribing to %s", self.status_topic)
            client.subscribe(self.status_topic, qos=1)
            error = None
        self._loop.call_soon_threadsafe(self._resolve_connect, error)

    def _resolve_connect(self, error: Optional[Exception]) -> None:
        if self._connected is None or self._connected.done():
            return
        if error is None:
            self._connected.set_result(None)
        else:
            self._connected.set_exception(error)

    def _on_message(self, client, userdata, message: mqtt.MQTTMessage) -> None:
        _LOGGER.debug("Received message on %s", message.topic)
        self._loop.call_soon_threadsafe(
            self.messages.put_nowait, parse_message(message.payload)
        )
