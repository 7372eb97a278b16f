"""
NEOTERMINAL Shell Module

The interactive command-line front end of a session.

Author: NEOTERMINAL Team
Version: 1.0.0
"""

import asyncio
import sys
from typing import Optional, TextIO, TYPE_CHECKING

from neoterminal.logger import get_logger
from neoterminal.shell.command import CommandResult

if TYPE_CHECKING:
    from neoterminal.core.config_loader import Config
    from neoterminal.core.session import Session


class Shell:
    """
    NEOTERMINAL Interactive Shell.

    Provides:
    - The read-eval-print loop
    - Prompt rendering (home shown as ``~``)
    - Script execution
    - The terminal sink commands write to

    Each line is handed to the session's CommandProcessor and awaited on a
    private event loop before the next one is read.

    Example:
        >>> shell = Shell(create_session())
        >>> shell.run()
    """

    def __init__(self, session: 'Session', output: Optional[TextIO] = None):
        self._session = session
        self._output = output or sys.stdout
        self._logger = get_logger('shell')
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._running = False
        self._exiting = False

        session.processor.terminal = self

    @property
    def session(self) -> 'Session':
        return self._session

    @property
    def running(self) -> bool:
        return self._running

    @property
    def exiting(self) -> bool:
        return self._exiting

    def write(self, text: str) -> None:
        """Write text to the terminal."""
        if not text.endswith('\n'):
            text += '\n'
        self._output.write(text)
        self._output.flush()

    def run(self) -> None:
        """
        Run the interactive shell.

        This is the main REPL loop.
        """
        self._running = True
        self._exiting = False

        welcome = self._session.config.filesystem.welcome_message
        if welcome:
            self.write(welcome)

        try:
            while self._running and not self._exiting:
                try:
                    line = input(self.get_prompt())
                except EOFError:
                    self.write("")
                    break
                except KeyboardInterrupt:
                    self.write("^C")
                    continue

                self.execute_line(line)
        finally:
            self.close()
            self._running = False

    def get_prompt(self) -> str:
        """Generate the shell prompt."""
        config = self._session.config
        cwd = self._session.filesystem.get_current_path()
        home = config.filesystem.home_directory.rstrip('/')

        if cwd == home:
            cwd_display = '~'
        elif home and cwd.startswith(home + '/'):
            cwd_display = '~' + cwd[len(home):]
        else:
            cwd_display = cwd

        return f"{config.shell.user}@{config.shell.hostname}:{cwd_display}$ "

    def execute_line(self, line: str) -> CommandResult:
        """
        Process one line and print its output.

        Returns:
            The command's result
        """
        if self._loop is None or self._loop.is_closed():
            self._loop = asyncio.new_event_loop()

        result = self._loop.run_until_complete(self._session.processor.process(line))

        if result.output:
            self.write(result.output)
        if not result.success and result.error:
            self.write(result.error)

        return result

    def close(self) -> None:
        """Release the event loop used to run commands."""
        if self._loop is not None and not self._loop.is_closed():
            self._loop.close()
        self._loop = None

    def request_exit(self) -> None:
        """Request the shell to exit after the current line."""
        self._logger.info("Exit requested")
        self._exiting = True

    def stop(self) -> None:
        """Stop the shell."""
        self._running = False

    def run_script(self, script: str) -> int:
        """
        Run a script (multiple commands).

        Blank lines and ``#`` comments are skipped; execution stops early
        if a command requests exit.

        Returns:
            0 if the last command succeeded, 1 otherwise
        """
        exit_code = 0

        try:
            for line in script.split('\n'):
                line = line.strip()
                if not line or line.startswith('#'):
                    continue

                result = self.execute_line(line)
                exit_code = 0 if result.success else 1

                if self._exiting:
                    break
        finally:
            self.close()

        return exit_code


def create_shell(config: Optional['Config'] = None, output: Optional[TextIO] = None) -> Shell:
    """Factory function to create a shell over a fresh session."""
    from neoterminal.core.session import create_session

    return Shell(create_session(config), output=output)
