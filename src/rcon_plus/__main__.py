import sys

from rcon_plus.client import RconClient
from rcon_plus.config import ClientConfiguration
from rcon_plus.protocol import MessageType
from rcon_plus.utils import log_error, setup_logging

EXIT_COMMANDS = ("exit", "quit")


def run_console(client: RconClient, lines, out=None) -> None:
    """Send every non-empty input line as a command and print the answer"""
    for line in lines:
        command = line.strip()
        if not command:
            continue
        if command.lower() in EXIT_COMMANDS:
            break

        result = client.request(MessageType.COMMAND, command)
        if result.ok:
            print(result.text, file=out)
        else:
            print(f"[rcon error] {result.error}", file=out)


def main() -> int:
    setup_logging()
    config = ClientConfiguration.from_env()

    is_valid, error_message = config.validate()
    if not is_valid:
        log_error("Configuration", error_message)
        return 1

    with RconClient().configure(config) as client:
        if not client.is_initialized:
            log_error("Connection", client.last_error or "not initialized")
            return 1
        run_console(client, sys.stdin)
    return 0


if __name__ == "__main__":
    sys.exit(main())
