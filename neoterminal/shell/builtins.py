"""
Shell Built-in Commands

Implements the reference command set of a NEOTERMINAL session.

Every command is a Command subclass registered with the session's
CommandRegistry by ``register_builtins``. Filesystem errors are reported
as failed results prefixed with the command name.

Author: NEOTERMINAL Team
Version: 1.0.0
"""

import time
from typing import Optional, List, Tuple, TYPE_CHECKING

from neoterminal.exceptions import (
    FileNotFoundError,
    FileSystemException,
    InvalidPermissionError,
)
from neoterminal.filesystem.nodes import FilePermissions, VirtualNode, VirtualDirectory
from neoterminal.logger import get_logger
from neoterminal.shell.command import (
    Command,
    CommandCategory,
    CommandResult,
    SkillLevel,
)

if TYPE_CHECKING:
    from neoterminal.core.processor import CommandProcessor
    from neoterminal.core.registry import CommandRegistry
    from neoterminal.filesystem.vfs import VirtualFileSystem


logger = get_logger('builtins')


def split_flags(args: List[str]) -> Tuple[set[str], List[str]]:
    """
    Separate single-letter flags from operands.

    ``-la`` yields the flags ``l`` and ``a``. A lone ``-`` is an operand.
    """
    flags: set[str] = set()
    operands: List[str] = []

    for arg in args:
        if arg.startswith('-') and len(arg) > 1:
            flags.update(arg[1:])
        else:
            operands.append(arg)

    return flags, operands


def _fs_error(command: str, error: FileSystemException) -> CommandResult:
    return CommandResult.fail(f"{command}: {error.message}")


def _expand(fs: 'VirtualFileSystem', target: str, recursive: bool) -> List[str]:
    """Paths affected by a possibly recursive metadata change."""
    if not fs.exists(target):
        raise FileNotFoundError(target)

    if recursive and fs.is_directory(target):
        return [path for path, _ in fs.walk(target)]
    return [target]


# Navigation

class CdCommand(Command):
    name = "cd"
    aliases = ["chdir"]
    category = CommandCategory.NAVIGATION
    description = "Change the current working directory"
    usage = "cd [directory]"
    examples = ["cd /home/user", "cd ..", "cd ~", "cd"]
    skill_level = SkillLevel.INITIATE

    async def execute(self, args, options):
        home = options.env.get('HOME', '/home/user')
        target = args[0] if args else '~'

        if target == '~':
            target = home
        elif target.startswith('~/'):
            target = home.rstrip('/') + target[1:]

        try:
            options.filesystem.change_directory(target)
        except FileSystemException as e:
            return _fs_error(self.name, e)

        return CommandResult.ok(f"Current directory: {options.filesystem.get_current_path()}")


class LsCommand(Command):
    """
    List directory contents.

    Supports ``-a`` (show dot-files) and ``-l`` (long format). Entries are
    listed in creation order.
    """

    name = "ls"
    aliases = ["dir", "list"]
    category = CommandCategory.NAVIGATION
    description = "List directory contents"
    usage = "ls [options] [directory]"
    examples = ["ls", "ls /home/user", "ls -l", "ls -la"]
    skill_level = SkillLevel.INITIATE

    async def execute(self, args, options):
        flags, operands = split_flags(args)
        show_all = 'a' in flags
        long_format = 'l' in flags
        target = operands[0] if operands else '.'

        fs = options.filesystem
        node = fs.get_node(target)

        if node is None:
            return CommandResult.fail(
                f"ls: cannot access '{target}': No such file or directory"
            )

        if not isinstance(node, VirtualDirectory):
            return CommandResult.ok(self._format(node, long_format))

        entries = fs.list_directory(target)
        if not show_all:
            entries = [entry for entry in entries if not entry.name.startswith('.')]

        if long_format:
            lines = [f"total {len(entries)}"]
            lines.extend(self._format(entry, True) for entry in entries)
            return CommandResult.ok('\n'.join(lines))

        return CommandResult.ok('  '.join(self._format(entry, False) for entry in entries))

    @staticmethod
    def _format(node: VirtualNode, long_format: bool) -> str:
        name = f"{node.name}/" if node.is_directory else node.name

        if not long_format:
            return name

        kind = 'd' if node.is_directory else '-'
        modified = time.strftime('%b %d %H:%M', time.localtime(node.modified))
        return (
            f"{kind}{node.permissions} {node.owner:<8} {node.group:<8} "
            f"{node.size():>8} {modified} {name}"
        )


class PwdCommand(Command):
    name = "pwd"
    category = CommandCategory.NAVIGATION
    description = "Print the current working directory"
    usage = "pwd"
    examples = ["pwd"]

    async def execute(self, args, options):
        return CommandResult.ok(options.filesystem.get_current_path())


# File operations

class CatCommand(Command):
    name = "cat"
    aliases = ["type"]
    category = CommandCategory.FILE_OPERATIONS
    description = "Display file contents"
    usage = "cat <file> [file...]"
    examples = ["cat README.txt", "cat /home/user/docs/notes.txt"]

    async def execute(self, args, options):
        if not args:
            return CommandResult.fail("cat: missing file operand")

        parts = []
        for path in args:
            try:
                content = options.filesystem.read_file(path)
            except FileSystemException as e:
                return _fs_error(self.name, e)
            parts.append(content.decode('utf-8', errors='replace'))

        return CommandResult.ok(''.join(parts))


class MkdirCommand(Command):
    name = "mkdir"
    category = CommandCategory.FILE_OPERATIONS
    description = "Create directories (parents are created as needed)"
    usage = "mkdir [-p] <directory> [directory...]"
    examples = ["mkdir projects", "mkdir -p data/logs/2077"]

    async def execute(self, args, options):
        flags, operands = split_flags(args)
        if not operands:
            return CommandResult.fail("mkdir: missing directory operand")

        fs = options.filesystem
        created = []

        for path in operands:
            if fs.exists(path) and 'p' not in flags:
                return CommandResult.fail(f"mkdir: cannot create directory '{path}': File exists")
            try:
                fs.mkdir(path)
            except FileSystemException as e:
                return _fs_error(self.name, e)
            created.append(path)

        return CommandResult.ok('\n'.join(f"Directory created: {path}" for path in created))


class TouchCommand(Command):
    name = "touch"
    category = CommandCategory.FILE_OPERATIONS
    description = "Create empty files or update their timestamps"
    usage = "touch <file> [file...]"
    examples = ["touch notes.txt"]

    async def execute(self, args, options):
        if not args:
            return CommandResult.fail("touch: missing file operand")

        fs = options.filesystem
        lines = []

        for path in args:
            node = fs.get_node(path)
            if node is not None:
                node.touch()
                lines.append(f"File access time updated: {path}")
                continue

            try:
                fs.write_file(path, b'')
            except FileSystemException as e:
                return _fs_error(self.name, e)
            lines.append(f"File created: {path}")

        return CommandResult.ok('\n'.join(lines))


class RmCommand(Command):
    """
    Remove files or directories.

    ``-r`` is required for directories; ``-f`` ignores missing targets and
    suppresses errors.
    """

    name = "rm"
    aliases = ["del", "delete"]
    category = CommandCategory.FILE_OPERATIONS
    description = "Remove files or directories"
    usage = "rm [options] <target> [target...]"
    examples = ["rm file.txt", "rm -r directory", "rm -rf unwanted_dir"]

    async def execute(self, args, options):
        flags, targets = split_flags(args)
        recursive = 'r' in flags or 'R' in flags
        force = 'f' in flags

        if not targets:
            return CommandResult.fail("rm: missing operand")

        fs = options.filesystem
        removed = []

        for target in targets:
            node = fs.get_node(target)

            if node is None:
                if force:
                    continue
                return CommandResult.fail(
                    f"rm: cannot remove '{target}': No such file or directory"
                )

            if node.is_directory and not recursive:
                return CommandResult.fail(
                    f"rm: cannot remove '{target}': Is a directory. Use -r to remove directories"
                )

            try:
                fs.delete_node(target)
            except FileSystemException as e:
                if force:
                    logger.debug("Suppressed rm error", context={'target': target, 'error': e.message})
                    continue
                return _fs_error(self.name, e)

            removed.append(target)

        return CommandResult.ok('\n'.join(f"Removed '{target}'" for target in removed))


class CpCommand(Command):
    name = "cp"
    aliases = ["copy"]
    category = CommandCategory.FILE_OPERATIONS
    description = "Copy files and directories"
    usage = "cp [-r] <source> [source...] <destination>"
    examples = ["cp notes.txt backup.txt", "cp -r missions /data"]
    skill_level = SkillLevel.OPERATOR

    async def execute(self, args, options):
        flags, operands = split_flags(args)
        recursive = 'r' in flags or 'R' in flags

        if len(operands) < 2:
            return CommandResult.fail("cp: missing operand. Usage: cp [options] source destination")

        *sources, destination = operands
        fs = options.filesystem

        if len(sources) > 1 and not fs.is_directory(destination):
            return CommandResult.fail(f"cp: target '{destination}' is not a directory")

        for source in sources:
            node = fs.get_node(source)
            if node is None:
                return CommandResult.fail(f"cp: cannot stat '{source}': No such file or directory")

            if node.is_directory and not recursive:
                return CommandResult.fail(f"cp: -r not specified; omitting directory '{source}'")

            try:
                fs.copy_node(source, destination)
            except FileSystemException as e:
                return _fs_error(self.name, e)

        return CommandResult.ok(f"Copied {len(sources)} item(s) to {destination}")


class MvCommand(Command):
    name = "mv"
    aliases = ["move", "rename"]
    category = CommandCategory.FILE_OPERATIONS
    description = "Move or rename files and directories"
    usage = "mv <source> [source...] <destination>"
    examples = ["mv draft.txt final.txt", "mv final.txt docs"]
    skill_level = SkillLevel.OPERATOR

    async def execute(self, args, options):
        if len(args) < 2:
            return CommandResult.fail("mv: missing operand. Usage: mv source destination")

        *sources, destination = args
        fs = options.filesystem

        if len(sources) > 1 and not fs.is_directory(destination):
            return CommandResult.fail(f"mv: target '{destination}' is not a directory")

        for source in sources:
            try:
                fs.move_node(source, destination)
            except FileSystemException as e:
                return _fs_error(self.name, e)

        return CommandResult.ok(f"Moved {len(sources)} item(s) to {destination}")


class ChmodCommand(Command):
    """
    Change stored permission bits.

    The mode may be octal (``755``) or symbolic (``rwxr-x---``). Modes are
    recorded and shown by ``ls -l`` but never checked.
    """

    name = "chmod"
    category = CommandCategory.FILE_OPERATIONS
    description = "Change file permissions"
    usage = "chmod [-R] <mode> <file> [file...]"
    examples = ["chmod 755 tools/scan", "chmod -R rw-r----- docs"]
    skill_level = SkillLevel.NETRUNNER

    async def execute(self, args, options):
        flags, operands = split_flags(args)
        if len(operands) < 2:
            return CommandResult.fail("chmod: missing operand. Usage: chmod [options] mode file...")

        mode, *targets = operands

        try:
            if len(mode) == 9:
                permissions = FilePermissions.from_string(mode)
            else:
                permissions = FilePermissions.from_octal(mode)
        except InvalidPermissionError:
            return CommandResult.fail(f"chmod: invalid mode: '{mode}'")

        fs = options.filesystem
        changed = 0

        for target in targets:
            try:
                for path in _expand(fs, target, 'R' in flags or 'r' in flags):
                    fs.chmod(path, permissions)
                    changed += 1
            except FileSystemException as e:
                return _fs_error(self.name, e)

        return CommandResult.ok(f"Changed permissions of {changed} item(s)")


class ChownCommand(Command):
    name = "chown"
    category = CommandCategory.FILE_OPERATIONS
    description = "Change file owner and group"
    usage = "chown [-R] <owner>[:<group>] <file> [file...]"
    examples = ["chown ghost notes.txt", "chown -R root:sys /sys"]
    skill_level = SkillLevel.NETRUNNER

    async def execute(self, args, options):
        flags, operands = split_flags(args)
        if len(operands) < 2:
            return CommandResult.fail("chown: missing operand. Usage: chown [options] owner[:group] file...")

        owner_spec, *targets = operands
        owner, _, group = owner_spec.partition(':')

        if not owner and not group:
            return CommandResult.fail(f"chown: invalid owner: '{owner_spec}'")

        fs = options.filesystem
        changed = 0

        for target in targets:
            try:
                for path in _expand(fs, target, 'R' in flags or 'r' in flags):
                    node = fs.get_node(path)
                    fs.chown(path, owner or node.owner, group or None)
                    changed += 1
            except FileSystemException as e:
                return _fs_error(self.name, e)

        return CommandResult.ok(f"Changed owner of {changed} item(s)")


# Utility

class EchoCommand(Command):
    name = "echo"
    category = CommandCategory.TEXT_PROCESSING
    description = "Display a line of text"
    usage = "echo [text...]"
    examples = ["echo hello", 'echo "I see the code"']

    async def execute(self, args, options):
        return CommandResult.ok(' '.join(args))


class HelpCommand(Command):
    """Lists commands by category, or shows one command in detail."""

    name = "help"
    aliases = ["?", "man"]
    category = CommandCategory.UTILITY
    description = "Show available commands"
    usage = "help [command]"
    examples = ["help", "help ls"]

    def __init__(self, registry: 'CommandRegistry'):
        self._registry = registry

    async def execute(self, args, options):
        if args:
            return self._describe(args[0])

        lines = ["NEOTERMINAL - Available Commands", ""]

        for category in CommandCategory:
            commands = [
                cmd for cmd in self._registry.get_commands_by_category(category)
                if not cmd.name.startswith('_')
            ]
            if not commands:
                continue

            lines.append(f"{category.value.replace('_', ' ').title()}:")
            for cmd in commands:
                lines.append(f"  {cmd.name:<10} {cmd.description}")
            lines.append("")

        lines.append('Type "help <command>" for details.')
        return CommandResult.ok('\n'.join(lines))

    def _describe(self, name: str) -> CommandResult:
        command = self._registry.lookup(name)
        if command is None:
            return CommandResult.fail(f"help: no help topic for '{name}'")

        lines = [f"{command.name} - {command.description}", f"Usage: {command.usage or command.name}"]

        aliases = self._registry.list_aliases(command.name)
        if aliases:
            lines.append(f"Aliases: {', '.join(aliases)}")

        if command.examples:
            lines.append("Examples:")
            lines.extend(f"  {example}" for example in command.examples)

        return CommandResult.ok('\n'.join(lines))


class HistoryCommand(Command):
    name = "history"
    category = CommandCategory.UTILITY
    description = "Display or clear command history"
    usage = "history [-c] [count]"
    examples = ["history", "history 10", "history -c"]

    def __init__(self, processor: 'CommandProcessor'):
        self._processor = processor

    async def execute(self, args, options):
        flags, operands = split_flags(args)

        if 'c' in flags:
            self._processor.clear_history()
            return CommandResult.ok("History cleared")

        history = self._processor.get_history()
        start = 0

        if operands:
            try:
                count = int(operands[0])
            except ValueError:
                return CommandResult.fail(f"history: numeric argument required: '{operands[0]}'")
            start = max(len(history) - count, 0)

        return CommandResult.ok('\n'.join(
            f"{number:5d}  {line}"
            for number, line in enumerate(history[start:], start=start + 1)
        ))


class ExitCommand(Command):
    name = "exit"
    aliases = ["quit", "logout"]
    category = CommandCategory.UTILITY
    description = "End the terminal session"
    usage = "exit"
    examples = ["exit"]

    async def execute(self, args, options):
        terminal = options.terminal
        if terminal is not None and hasattr(terminal, 'request_exit'):
            terminal.request_exit()
        return CommandResult.ok("Connection terminated.")


def register_builtins(
    registry: 'CommandRegistry',
    processor: Optional['CommandProcessor'] = None
) -> List[Command]:
    """
    Register the built-in command set.

    ``history`` is only registered when a processor is given.

    Returns:
        The registered commands
    """
    commands: List[Command] = [
        CdCommand(),
        LsCommand(),
        PwdCommand(),
        CatCommand(),
        MkdirCommand(),
        TouchCommand(),
        RmCommand(),
        CpCommand(),
        MvCommand(),
        ChmodCommand(),
        ChownCommand(),
        EchoCommand(),
        HelpCommand(registry),
        ExitCommand(),
    ]

    if processor is not None:
        commands.append(HistoryCommand(processor))

    for command in commands:
        registry.register(command)

    logger.debug(f"Registered {len(commands)} built-in commands")
    return commands
