import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_HTTP_ADDRESS = "localhost:3001"
DEFAULT_SSE_ADDRESS = "localhost:3002"


def get_env_str(key: str, default: str = "") -> str:
    return os.environ.get(key, default)


def get_env_float(key: str, default: float = 0.0) -> float:
    try:
        return float(os.environ.get(key, str(default)))
    except ValueError:
        return default


def get_env_bool(key: str, default: bool = False) -> bool:
    value = os.environ.get(key, "").lower()
    if value in ("true", "1", "yes", "on"):
        return True
    elif value in ("false", "0", "no", "off"):
        return False
    return default


def get_server_name() -> str:
    return get_env_str("GREETER_SERVER_NAME", "greeter")


def get_http_address() -> str:
    # An explicitly empty value disables the listener.
    return get_env_str("GREETER_HTTP_ADDR", DEFAULT_HTTP_ADDRESS)


def get_sse_address() -> str:
    return get_env_str("GREETER_SSE_ADDR", DEFAULT_SSE_ADDRESS)


def get_use_stdio() -> bool:
    return get_env_bool("GREETER_STDIO", False)


def get_log_level() -> str:
    return get_env_str("LOG_LEVEL", "INFO").upper()


def get_shutdown_timeout() -> float:
    return get_env_float("GREETER_SHUTDOWN_TIMEOUT", 5.0)


def get_instructions() -> Optional[str]:
    value = get_env_str("GREETER_INSTRUCTIONS", "")
    return value if value else None
