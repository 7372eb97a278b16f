#!/usr/bin/env python3
"""
NEOTERMINAL Core Tests

Covers configuration, logging, the exception hierarchy, session wiring,
the interactive shell and the command-line entry point.

Author: NEOTERMINAL Team
Version: 1.0.0
"""

import contextlib
import io
import json
import logging
import os
import tempfile
import unittest

import neoterminal
from neoterminal.core.config_loader import Config, ConfigLoader, ShellConfig, load_config
from neoterminal.core.session import create_session
from neoterminal.exceptions import (
    CommandTimeoutError,
    ConfigValidationError,
    FileNotFoundError,
    FileSystemException,
    InvalidPathError,
    RootOperationError,
    ShellException,
)
from neoterminal.logger import LogFormatter, Logger, LogLevel, get_logger
from neoterminal.main import main
from neoterminal.shell.shell import Shell


class TestExceptions(unittest.TestCase):
    """Test the exception hierarchy."""

    def test_filesystem_exception(self):
        exc = FileNotFoundError('/missing')

        self.assertIsInstance(exc, FileSystemException)
        self.assertEqual(exc.message, 'No such file or directory: /missing')
        self.assertEqual(exc.error_code, 4001)
        self.assertEqual(exc.path, '/missing')
        self.assertIn('4001', str(exc))

    def test_structural_errors(self):
        self.assertEqual(RootOperationError().message, 'Cannot delete root directory')
        self.assertEqual(RootOperationError('move').message, 'Cannot move root directory')
        self.assertEqual(InvalidPathError('/', reason='missing file name').error_code, 4010)

    def test_shell_exceptions(self):
        exc = CommandTimeoutError('ask', timeout=2.5)

        self.assertIsInstance(exc, ShellException)
        self.assertEqual(exc.message, 'ask: timed out after 2.5s')
        self.assertEqual(exc.context['timeout'], 2.5)

        exc = ConfigValidationError('bad value', key='shell.history_size')
        self.assertEqual(exc.key, 'shell.history_size')
        self.assertIn('5003', str(exc))


class TestLogger(unittest.TestCase):
    """Test the logging system."""

    def tearDown(self):
        Logger.initialize(level=LogLevel.WARNING, console_output=False)

    def test_logger_singleton(self):
        """Same subsystem gives the same instance."""
        self.assertIs(Logger('test1'), Logger('test1'))
        self.assertIs(get_logger('test1'), Logger('test1'))
        self.assertIsNot(Logger('test1'), Logger('test2'))

    def test_log_levels(self):
        self.assertTrue(LogLevel.ERROR > LogLevel.INFO)
        self.assertTrue(LogLevel.INFO < LogLevel.NOTICE < LogLevel.WARNING)
        self.assertEqual(LogLevel.from_name('notice'), LogLevel.NOTICE)

        with self.assertRaises(ValueError):
            LogLevel.from_name('chatty')

    def test_session_logs(self):
        Logger.initialize(level=LogLevel.DEBUG, console_output=False)
        log = get_logger('unittest')

        log.info("Node created", context={'path': '/tmp'})
        log.debug("Detail")

        entries = Logger.get_session_logs(subsystem='unittest')
        self.assertEqual([entry['message'] for entry in entries], ["Node created", "Detail"])
        self.assertEqual(entries[0]['context'], {'path': '/tmp'})

        warnings = Logger.get_session_logs(level='WARNING', subsystem='unittest')
        self.assertEqual(warnings, [])

    def test_level_filtering(self):
        Logger.initialize(level=LogLevel.ERROR, console_output=False)
        log = get_logger('unittest-filter')

        log.warning("ignored")
        log.error("kept")

        entries = Logger.get_session_logs(subsystem='unittest-filter')
        self.assertEqual([entry['message'] for entry in entries], ["kept"])

    def test_formatter(self):
        record = logging.LogRecord('neoterminal.test', logging.INFO, __file__, 1, 'hello', None, None)
        record.subsystem = 'test'
        record.context = {'k': 'v'}

        line = LogFormatter(use_colors=False).format(record)
        self.assertIn('[test] hello {k=v}', line)


class TestConfig(unittest.TestCase):
    """Test the configuration system."""

    def _write(self, data):
        handle = tempfile.NamedTemporaryFile('w', suffix='.json', delete=False, encoding='utf-8')
        with handle:
            if isinstance(data, str):
                handle.write(data)
            else:
                json.dump(data, handle)
        self.addCleanup(os.remove, handle.name)
        return handle.name

    def test_default_config(self):
        config = Config()

        self.assertEqual(config.filesystem.home_directory, '/home/user')
        self.assertEqual(config.shell.history_size, 1000)
        self.assertIsNone(config.shell.command_timeout)
        self.assertEqual(config.shell.numeric_command, '_numeric')
        self.assertEqual(config.shell.fallback_command, '_command_choice')
        self.assertEqual(config.shell.response_command, '_response')
        self.assertEqual(config.environment['HOME'], '/home/user')

    def test_bundled_config(self):
        path = os.path.join(os.path.dirname(neoterminal.__file__), 'config.json')
        config = load_config(path)

        self.assertEqual(config.shell.command_timeout, 30)
        self.assertEqual(config.logging.level, 'WARNING')

    def test_load_partial_file(self):
        path = self._write({'shell': {'hostname': 'ghostnet', 'history_size': 50}})
        loader = ConfigLoader()
        config = loader.load(path)

        self.assertTrue(loader.loaded)
        self.assertEqual(config.shell.hostname, 'ghostnet')
        self.assertEqual(config.shell.history_size, 50)
        self.assertEqual(config.shell.user, 'user')

    def test_load_errors(self):
        with self.assertRaises(ConfigValidationError):
            ConfigLoader().load('/definitely/not/here.json')

        with self.assertRaises(ConfigValidationError):
            ConfigLoader().load(self._write('{not json'))

    def test_validation(self):
        invalid = [
            {'shell': {'history_size': 0}},
            {'shell': {'command_timeout': -1}},
            {'filesystem': {'home_directory': 'home/user'}},
            {'logging': {'level': 'LOUD'}},
            {'shell': 'not a section'},
        ]
        for data in invalid:
            with self.assertRaises(ConfigValidationError, msg=str(data)):
                ConfigLoader().from_dict(data)

    def test_get_and_set(self):
        loader = ConfigLoader()

        self.assertEqual(loader.get('shell.history_size'), 1000)
        self.assertEqual(loader.get('environment.USER'), 'user')
        self.assertEqual(loader.get('shell.nope', 'fallback'), 'fallback')

        loader.set('shell.hostname', 'matrix')
        self.assertEqual(loader.config.shell.hostname, 'matrix')

        with self.assertRaises(ConfigValidationError):
            loader.set('shell.history_size', -5)
        self.assertEqual(loader.config.shell.history_size, 1000)

        with self.assertRaises(ConfigValidationError):
            loader.set('kernel.name', 'x')

    def test_to_dict(self):
        data = ConfigLoader().to_dict()
        self.assertEqual(data['shell']['history_size'], 1000)
        self.assertIn('/sys', data['filesystem']['initial_directories'])


class TestSession(unittest.IsolatedAsyncioTestCase):
    """Test session wiring."""

    async def test_builtins_registered(self):
        session = create_session(init_logging=False)

        for name in ('cd', 'ls', 'pwd', 'cat', 'mkdir', 'touch', 'rm', 'cp',
                     'mv', 'chmod', 'chown', 'echo', 'help', 'history', 'exit'):
            self.assertIn(name, session.registry, name)

        result = await session.execute('pwd')
        self.assertEqual(result.output, '/home/user')

    async def test_sessions_are_independent(self):
        first = create_session(init_logging=False)
        second = create_session(init_logging=False)

        await first.execute('cd /data')

        self.assertEqual(first.filesystem.get_current_path(), '/data')
        self.assertEqual(second.filesystem.get_current_path(), '/home/user')
        self.assertIsNot(first.registry, second.registry)

    async def test_without_builtins(self):
        session = create_session(with_builtins=False, init_logging=False)
        self.assertEqual(len(session.registry), 0)

        result = await session.execute('ls')
        self.assertEqual(result.error, 'Command not found: ls')

    async def test_config_flows_into_processor(self):
        config = Config(shell=ShellConfig(history_size=1))
        session = create_session(config, init_logging=False)

        await session.execute('pwd')
        await session.execute('ls')
        self.assertEqual(session.processor.get_history(), ['ls'])
        self.assertEqual(session.processor.env['SHELL'], '/bin/neosh')


class TestShell(unittest.TestCase):
    """Test the interactive shell front end."""

    def setUp(self):
        self.output = io.StringIO()
        self.shell = Shell(create_session(init_logging=False), output=self.output)

    def tearDown(self):
        self.shell.close()

    def test_prompt(self):
        self.assertEqual(self.shell.get_prompt(), 'user@neoterminal:~$ ')

        self.shell.execute_line('cd docs')
        self.assertEqual(self.shell.get_prompt(), 'user@neoterminal:~/docs$ ')

        self.shell.execute_line('cd /data')
        self.assertEqual(self.shell.get_prompt(), 'user@neoterminal:/data$ ')

    def test_run_script(self):
        code = self.shell.run_script("pwd\n# a comment\n\ncd /net\npwd\n")

        self.assertEqual(code, 0)
        self.assertIn('/home/user\n', self.output.getvalue())
        self.assertIn('/net\n', self.output.getvalue())

    def test_errors_are_printed(self):
        code = self.shell.run_script('frobnicate')

        self.assertEqual(code, 1)
        self.assertIn('Command not found: frobnicate', self.output.getvalue())

    def test_exit_stops_script(self):
        self.shell.run_script('exit\necho unreachable')

        self.assertTrue(self.shell.exiting)
        self.assertNotIn('unreachable', self.output.getvalue())

    def test_shell_is_the_terminal(self):
        self.assertIs(self.shell.session.processor.terminal, self.shell)


class TestMain(unittest.TestCase):
    """Test the command-line entry point."""

    def tearDown(self):
        Logger.initialize(level=LogLevel.WARNING, console_output=False)

    def test_single_command(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main(['-c', 'echo hello from the grid'])

        self.assertEqual(code, 0)
        self.assertIn('hello from the grid', out.getvalue())

    def test_bad_arguments(self):
        with contextlib.redirect_stderr(io.StringIO()):
            self.assertEqual(main(['--config']), 2)
            self.assertEqual(main(['--bogus']), 2)
            self.assertEqual(main(['--config', '/definitely/not/here.json']), 1)


if __name__ == '__main__':
    unittest.main()
