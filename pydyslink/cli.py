import argparse
import asyncio
import logging
import sys
from typing import Callable, List, Optional

from .client import DysonClient
from .commands import CommandParser, check_arity, get_command, usage_text
from .constants import SUPPORTED_MODELS
from .exceptions import *
from .models import Config

_LOGGER = logging.getLogger(__name__)


def build_parser() -> CommandParser:
    parser = CommandParser(
        prog="dyslink",
        usage="%(prog)s [flags] <command> <args>",
        description="Control Dyson Link purifiers on the local network",
        epilog=usage_text(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--address",
        type=str,
        dest="address",
        help="Address [required]",
        metavar="ADDRESS",
        default="",
    )
    parser.add_argument(
        "--user", type=str, dest="user", help="Username", metavar="USER", default=""
    )
    parser.add_argument(
        "--pass", type=str, dest="password", help="Password", metavar="PASS", default=""
    )
    parser.add_argument(
        "--model",
        type=str,
        dest="model",
        help=f"Device Model [required], one of {', '.join(SUPPORTED_MODELS)}",
        metavar="MODEL",
        default="",
    )
    parser.add_argument(
        "--debug", action="store_true", dest="debug", help="Enable debugging"
    )
    parser.add_argument("command", type=str, nargs="?", default="", help=argparse.SUPPRESS)
    parser.add_argument("args", nargs=argparse.REMAINDER, help=argparse.SUPPRESS)
    return parser


def validate_connection_config(config: Config) -> None:
    if config.model not in SUPPORTED_MODELS:
        raise UsageError("Must supply model type")
    if not config.address:
        raise UsageError("Must supply address")


async def dispatch(
    config: Config,
    name: str,
    args: List[str],
    client_factory: Optional[Callable[[Config], DysonClient]] = None,
) -> None:
    if not name:
        raise UsageError("Must supply command")
    command = get_command(name)
    check_arity(name, command, args)

    client = None
    if command.connect:
        validate_connection_config(config)
        client = (client_factory or DysonClient)(config)
        await client.connect()

    try:
        await command.handler(client, args)
    finally:
        if client is not None:
            client.disconnect()


def run(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        options = parser.parse_args(argv)
        config = Config(
            address=options.address,
            user=options.user,
            password=options.password,
            model=options.model,
            debug=options.debug,
        )
        logging.basicConfig(level=logging.DEBUG if config.debug else logging.WARNING)
        asyncio.run(dispatch(config, options.command, options.args))
    except UsageError as e:
        print(e, file=sys.stderr)
        print(e.usage or parser.format_help(), file=sys.stderr)
        return e.exit_code
    except DysLinkException as e:
        _LOGGER.debug("Command failed", exc_info=True)
        print(e, file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        return 130
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
