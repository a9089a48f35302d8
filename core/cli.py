"""
Command line arguments.

    vosk-http-server --model=<model directory path> [--port=<port number>] [--debug[=<vosk log level>]]

Command line values override environment settings. A missing model
directory prints the help text and exits with code 1.
"""

import argparse
import sys
from typing import List, Optional

from core.config import Settings, get_settings

PROGRAM_NAME = "vosk-http-server"

HEADER = f"""\
{PROGRAM_NAME} is a simple HTTP JSON server, loading a Vosk engine model to transcript speeches.
The server has two endpoints:

- HTTP GET /transcript
  The request query string arguments contain parameters,
  including a WAV file name already accessible by the server.

- HTTP POST /transcript
  The request query string arguments contain parameters,
  the request body contains the WAV file to be submitted to the server.
"""

EXAMPLES = f"""\
Server settings examples:

    stdout includes the server internal debug logs and Vosk debug logs (log level 2)
    {PROGRAM_NAME} --model=../models/vosk-model-en-us-aspire-0.2 --port=8086 --debug=2

    stdout includes the server internal debug logs without Vosk debug logs (log level -1)
    {PROGRAM_NAME} --model=../models/vosk-model-en-us-aspire-0.2 --port=8086 --debug

    stdout includes minimal info, just request and response messages
    {PROGRAM_NAME} --model=../models/vosk-model-en-us-aspire-0.2 --port=8086

    stdout includes minimal info, default port number is 3000
    {PROGRAM_NAME} --model=../models/vosk-model-small-en-us-0.15

Client requests examples:

    1. GET /transcript - query string includes just the speech file argument

    curl -s -X GET -H "Accept: application/json" -G \\
         --data-urlencode speech="../audio/2830-3980-0043.wav" \\
         http://localhost:3000/transcript

    2. GET /transcript - query string includes arguments: id, speech, model, grammar

    curl -s -X GET -H "Accept: application/json" -G \\
         --data-urlencode id="1620060067830" \\
         --data-urlencode speech="../audio/2830-3980-0043.wav" \\
         --data-urlencode model="vosk-model-en-us-aspire-0.2" \\
         --data-urlencode grammar='["experience proves this"]' \\
         http://localhost:3000/transcript

    3. POST /transcript - body includes the speech file

    curl -s -X POST -H "Accept: application/json" -H "Content-Type: audio/wav" \\
         --data-binary "@../audio/2830-3980-0043.wav" \\
         "http://localhost:3000/transcript?id=1620060067830&model=vosk-model-en-us-aspire-0.2"
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description=HEADER,
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--model", help="Vosk model directory path")
    parser.add_argument("--port", type=int, help="HTTP port (default 3000, env PORT)")
    parser.add_argument(
        "--debug",
        nargs="?",
        const="true",
        default=None,
        help="internal debug logs; with a value, also the Vosk log level",
    )
    return parser


def help_and_exit(parser: argparse.ArgumentParser) -> None:
    parser.print_help()
    sys.exit(1)


def parse_args(argv: Optional[List[str]] = None) -> Settings:
    """
    Parse command line arguments into Settings.

    Args:
        argv: Arguments without the program name, defaults to sys.argv[1:]

    Returns:
        Settings with command line overrides applied
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()

    overrides = {}
    if args.model:
        overrides["model_dir"] = args.model
    if args.port:
        overrides["api_port"] = args.port
    if args.debug is not None:
        overrides["debug"] = args.debug

    settings = settings.model_copy(update=overrides)

    # Model directory is mandatory
    if not settings.model_dir:
        help_and_exit(parser)

    return settings
