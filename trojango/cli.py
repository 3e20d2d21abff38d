"""Command-line entry point."""

from __future__ import annotations

import argparse

from trojango import golog  # noqa: F401  (registers the default logger)
from trojango import logger as log
from trojango import option
from trojango.common import TrojanError
from trojango.easy import EasyOption
from trojango.proxy import ConfigOption, StdinOption


def build_parser() -> argparse.ArgumentParser:
    """Return the parser for every command-line option."""
    parser = argparse.ArgumentParser(prog="trojan-go")
    parser.add_argument("-config", "--config", default="", help="Trojan-Go config filename (.yaml/.yml/.json)")
    parser.add_argument("-stdin-format", "--stdin-format", dest="stdin_format", default="disabled",
                        help="Read from standard input (yaml/json)")
    parser.add_argument("-stdin-suppress-hint", "--stdin-suppress-hint", dest="stdin_suppress_hint",
                        action="store_true", help="Suppress hint text")
    parser.add_argument("-server", "--server", action="store_true", help="Run a trojan-go server")
    parser.add_argument("-client", "--client", action="store_true", help="Run a trojan-go client")
    parser.add_argument("-password", "--password", default="", help="Password for authentication")
    parser.add_argument("-remote", "--remote", default="", help="Remote address, e.g. 127.0.0.1:12345")
    parser.add_argument("-local", "--local", default="", help="Local address, e.g. 127.0.0.1:12345")
    parser.add_argument("-key", "--key", default="server.key", help="Key of the server")
    parser.add_argument("-cert", "--cert", default="server.crt", help="Certificates of the server")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    option.register_handler(ConfigOption(args.config))
    option.register_handler(StdinOption(args.stdin_format, args.stdin_suppress_hint))
    option.register_handler(EasyOption(
        server=args.server, client=args.client, password=args.password,
        local=args.local, remote=args.remote, cert=args.cert, key=args.key,
    ))
    while True:
        try:
            handler = option.pop_option_handler()
        except TrojanError:
            log.fatal("invalid options")
            return 1
        try:
            handler.handle()
        except TrojanError:
            continue
        return 0


if __name__ == "__main__":
    raise SystemExit(main())