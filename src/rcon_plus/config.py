import os
from dataclasses import dataclass
from typing import ClassVar


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ClientConfiguration:
    host: str = "127.0.0.1"
    port: int = 25575
    password: str = ""
    # zero or less waits for an answer forever
    timeout_seconds: float = 3
    retry_connect: bool = True
    reconnect_delay_seconds: float = 5
    max_recon_attempts: int = 5
    # Spigot and friends process one request at a time
    server_is_multithreaded: bool = False

    DEFAULT: ClassVar["ClientConfiguration"]

    @classmethod
    def from_env(cls) -> "ClientConfiguration":
        return cls(
            host=os.getenv("RCON_HOST", cls.host),
            port=int(os.getenv("RCON_PORT", str(cls.port))),
            password=os.getenv("RCON_PASSWORD", cls.password),
            timeout_seconds=float(os.getenv("RCON_TIMEOUT", str(cls.timeout_seconds))),
            retry_connect=_env_bool("RCON_RETRY", cls.retry_connect),
            reconnect_delay_seconds=float(
                os.getenv("RCON_RECONNECT_DELAY", str(cls.reconnect_delay_seconds))
            ),
            max_recon_attempts=int(
                os.getenv("RCON_MAX_RECONNECT_ATTEMPTS", str(cls.max_recon_attempts))
            ),
            server_is_multithreaded=_env_bool(
                "RCON_MULTITHREADED", cls.server_is_multithreaded
            ),
        )

    def validate(self) -> tuple[bool, str]:
        if not self.host:
            return False, "RCON_HOST environment variable not set"

        if not 0 < self.port < 65536:
            return False, f"RCON port {self.port} is out of range"

        if self.reconnect_delay_seconds < 0:
            return False, "Reconnect delay must not be negative"

        if self.max_recon_attempts < 0:
            return False, "Reconnect attempts must not be negative"

        return True, "Configuration is valid"


ClientConfiguration.DEFAULT = ClientConfiguration()
