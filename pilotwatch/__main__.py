"""Entry point for ``python -m pilotwatch`` and the ``pilotwatch`` script."""

import sys

from pilotwatch.errors import ConfigError


def run() -> int:
    """Run the CLI, reporting a bad environment instead of a traceback."""
    # Configuration is read when pilotwatch.cli is first imported
    try:
        from pilotwatch.cli import main
    except ConfigError as e:
        print(f'Invalid configuration: {e}', file=sys.stderr)
        return 1
    return main()


if __name__ == '__main__':
    raise SystemExit(run())
