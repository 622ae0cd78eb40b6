"""Allow `python -m agent_gateway` to execute the CLI."""

import sys

from agent_gateway.main import main


def run() -> None:
    """Delegate to the CLI entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
