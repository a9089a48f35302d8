"""
Vosk HTTP Server - Main entry point.

Run with:
    python -m cmd.api.main --model=<model directory path> [--port=<port>] [--debug[=<level>]]
"""

import warnings

# Suppress expected warnings at startup
warnings.filterwarnings(
    "ignore", message=".*protected namespace.*", category=UserWarning
)

from internal.api.server import main  # noqa: E402


if __name__ == "__main__":
    main()
