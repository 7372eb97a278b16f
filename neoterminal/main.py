#!/usr/bin/env python3
"""
NEOTERMINAL - A narrative hacker shell simulation

This is the main entry point for NEOTERMINAL.

Usage:
    neoterminal                      Start an interactive session
    neoterminal --config FILE        Use a JSON configuration file
    neoterminal -c "COMMAND"         Run one line and exit
    neoterminal --script FILE        Run a script of commands and exit

Author: NEOTERMINAL Team
Version: 1.0.0
"""

import sys
from typing import Optional, List

from neoterminal.core.config_loader import load_config
from neoterminal.core.session import create_session
from neoterminal.exceptions import ConfigValidationError
from neoterminal.shell.shell import Shell


USAGE = __doc__.split('Usage:')[1].split('Author:')[0].rstrip()


def _take_value(argv: List[str], flag: str) -> Optional[str]:
    """Pop ``flag VALUE`` out of argv, returning VALUE."""
    if flag not in argv:
        return None

    index = argv.index(flag)
    if index + 1 >= len(argv):
        raise ValueError(f"{flag} requires an argument")

    value = argv[index + 1]
    del argv[index:index + 2]
    return value


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for NEOTERMINAL.

    Startup sequence:
    1. Load configuration
    2. Initialize logging and the session
    3. Run a command, a script, or the interactive shell
    """
    argv = list(sys.argv[1:] if argv is None else argv)

    if '-h' in argv or '--help' in argv:
        print(f"Usage:{USAGE}")
        return 0

    try:
        config_path = _take_value(argv, '--config')
        command = _take_value(argv, '-c')
        script_path = _take_value(argv, '--script')
    except ValueError as e:
        print(f"neoterminal: {e}", file=sys.stderr)
        return 2

    if argv:
        print(f"neoterminal: unexpected arguments: {' '.join(argv)}", file=sys.stderr)
        return 2

    try:
        config = load_config(config_path)
    except ConfigValidationError as e:
        print(f"neoterminal: {e.message}", file=sys.stderr)
        return 1

    shell = Shell(create_session(config))

    if command is not None:
        return shell.run_script(command)

    if script_path is not None:
        try:
            with open(script_path, 'r', encoding='utf-8') as f:
                script = f.read()
        except OSError as e:
            print(f"neoterminal: cannot read script: {e}", file=sys.stderr)
            return 1
        return shell.run_script(script)

    try:
        shell.run()
    except KeyboardInterrupt:
        print("\n\nInterrupted")

    return 0


if __name__ == '__main__':
    sys.exit(main())
