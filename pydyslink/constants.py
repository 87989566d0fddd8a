# Supported device models
TYPE_MODEL_N475 = "475"  # Pure Cool Link tower
TYPE_MODEL_N469 = "469"  # Pure Cool Link desk
TYPE_MODEL_N455 = "455"  # Pure Hot+Cool Link
SUPPORTED_MODELS = (TYPE_MODEL_N475, TYPE_MODEL_N469, TYPE_MODEL_N455)

# MQTT
MQTT_PORT = 1883
MQTT_KEEPALIVE = 60
TOPIC_STATUS = "{model}/{serial}/status/current"
TOPIC_COMMAND = "{model}/{serial}/command"
MODE_REASON = "LAPP"

# Outgoing messages
MSG_STATE_SET = "STATE-SET"
MSG_REQUEST_CURRENT_STATE = "REQUEST-CURRENT-STATE"
MSG_JOIN_NETWORK = "JOIN-NETWORK"

# Incoming messages
MSG_CURRENT_STATE = "CURRENT-STATE"
MSG_STATE_CHANGE = "STATE-CHANGE"
MSG_ENVIRONMENTAL_SENSOR_DATA = "ENVIRONMENTAL-CURRENT-SENSOR-DATA"

# State fields
FIELD_FAN_MODE = "fmod"
FIELD_FAN_STATE = "fnst"
FIELD_FAN_SPEED = "fnsp"
FIELD_QUALITY_TARGET = "qtar"
FIELD_OSCILLATE = "oson"
FIELD_FILTER_LIFE = "filf"
FIELD_ERROR_CODE = "ercd"
FIELD_WARNING_CODE = "wacd"
FIELD_NIGHT_MODE = "nmod"
FIELD_STANDBY_MONITORING = "rhtm"
FIELD_HEAT_MODE = "hmod"
FIELD_HEAT_STATE = "hsta"
FIELD_HEAT_TARGET = "hmax"
FIELD_FOCUSED_MODE = "ffoc"
FIELD_TILT = "tilt"
FIELD_SLEEP_TIMER = "sltm"
FIELD_RESET_FILTER = "rstf"

# Environment fields
FIELD_TEMPERATURE = "tact"
FIELD_HUMIDITY = "hact"
FIELD_PARTICLE = "pact"
FIELD_VOC = "vact"

RESET_FILTER = "RSTF"
FILTER_LIFE_MAX_HOURS = 4300

QUALITY_TARGETS = {
    "0001": "High",
    "0003": "Normal",
    "0004": "Low",
}

FAN_SPEED_MIN = 1
FAN_SPEED_MAX = 10
HEAT_OFF_TEMP = 0
HEAT_TEMP_MIN_F = 33
HEAT_TEMP_MAX_F = 99

# Discovery
SERVICE_TYPE = "_dyson_mqtt._tcp.local."
RESOLVE_TIMEOUT_MS = 3000

# Timing (seconds)
MONITOR_INTERVAL = 10
DISCOVERY_TIMEOUT = 15
CONNECT_TIMEOUT = 10
