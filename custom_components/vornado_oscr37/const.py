DOMAIN = "vornado_oscr37"

MANUFACTURER = "Vornado"
MODEL = "OSCR37"

# Config entry data
CONF_NAME = "name"
CONF_CONTROL_ID = "control_id"
CONF_QUERY_ID = "query_id"
CONF_ALEXA_SERVICE_HOST = "alexa_service_host"
CONF_AMAZON_PAGE = "amazon_page"
CONF_COOKIE = "cookie"

DEFAULT_NAME = "Vornado OSCR37"
DEFAULT_ALEXA_SERVICE_HOST = "pitangui.amazon.com"
DEFAULT_AMAZON_PAGE = "amazon.com"

# Options
CONF_POLLING_ENABLED = "polling_enabled"
CONF_POLL_INTERVAL = "poll_interval"
CONF_TIMEOUT = "timeout"

DEFAULT_POLLING_ENABLED = False
DEFAULT_POLL_INTERVAL = 30  # seconds
DEFAULT_TIMEOUT = 30  # seconds
MIN_POLL_INTERVAL = 5
MAX_POLL_INTERVAL = 300
MIN_TIMEOUT = 1
MAX_TIMEOUT = 300

# Repeated refresh requests inside this window collapse into one fetch
THROTTLE_WINDOW = 0.05  # seconds
HANDSHAKE_RETRY_DELAY = 60.0  # seconds

# Capability namespaces reported by the cloud API
NS_ENDPOINT_HEALTH = "Alexa.EndpointHealth"
NS_POWER = "Alexa.PowerController"
NS_MODE = "Alexa.ModeController"
NS_TOGGLE = "Alexa.ToggleController"

INSTANCE_INTENSITY = "1"
INSTANCE_OSCILLATION = "2"
INSTANCE_SHUTDOWN_TIMER = "3"

ENTITY_TYPE_APPLIANCE = "APPLIANCE"

FAN_INTENSITIES = ("0", "1", "2", "3")
SHUTDOWN_TIMER_VALUES = ("0", "1", "2", "3", "4")

# Intensity level -> rotation speed percentage
INTENSITY_PERCENTAGES = {"0": 25, "1": 50, "2": 75, "3": 100}
PERCENTAGE_STEP = 25

# Characteristics exposed to the framework
CHAR_ACTIVE = "active"
CHAR_ROTATION_SPEED = "rotation_speed"
CHAR_SWING_MODE = "swing_mode"

ACTIVE = 1
INACTIVE = 0
SWING_ENABLED = 1
SWING_DISABLED = 0


def normalize_poll_interval(value) -> int:
    """Normalize poll interval to a safe integer range."""
    try:
        ivalue = int(value)
    except (TypeError, ValueError):
        return DEFAULT_POLL_INTERVAL
    return max(MIN_POLL_INTERVAL, min(MAX_POLL_INTERVAL, ivalue))


def normalize_timeout(value) -> int:
    """Normalize the readiness timeout (seconds) to a safe integer range."""
    try:
        ivalue = int(value)
    except (TypeError, ValueError):
        return DEFAULT_TIMEOUT
    return max(MIN_TIMEOUT, min(MAX_TIMEOUT, ivalue))
