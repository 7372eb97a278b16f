#!/usr/bin/env python3
"""
NEOTERMINAL Filesystem Tests

Covers the node model, permission strings, path arithmetic and the
VirtualFileSystem operations.

Run with: python -m pytest neoterminal/tests -v

Author: NEOTERMINAL Team
Version: 1.0.0
"""

import sys
import unittest

from neoterminal.core.config_loader import FilesystemConfig
from neoterminal.exceptions import (
    FileNotFoundError,
    FileExistsError,
    InvalidPathError,
    InvalidPermissionError,
    NotADirectoryError,
    NotAFileError,
    RootOperationError,
)
from neoterminal.filesystem import (
    FilePermissions,
    FileSystemEvent,
    NodeType,
    PathResolver,
    Permission,
    VirtualDirectory,
    VirtualFile,
    VirtualFileSystem,
)


class TestPermissions(unittest.TestCase):
    """Test permission bits and their string forms."""

    def test_defaults(self):
        """Directories and files get the usual default modes."""
        self.assertEqual(str(VirtualDirectory('d').permissions), 'rwxr-xr-x')
        self.assertEqual(str(VirtualFile('f').permissions), 'rw-r--r--')

    def test_round_trip_all_triples(self):
        """Every user/group/other combination survives to_string/from_string."""
        for user in range(8):
            for group in range(8):
                for other in range(8):
                    perms = FilePermissions(Permission(user), Permission(group), Permission(other))
                    parsed = FilePermissions.from_string(perms.to_string())
                    self.assertEqual(parsed, perms)

    def test_from_string_rejects_malformed(self):
        for bad in ('rwx', 'rwxrwxrwxr', 'wrxrwxrwx', 'rwxrwxrwz', ''):
            with self.assertRaises(InvalidPermissionError):
                FilePermissions.from_string(bad)

    def test_octal(self):
        perms = FilePermissions.from_octal('755')
        self.assertEqual(str(perms), 'rwxr-xr-x')
        self.assertEqual(perms.to_octal(), 0o755)
        self.assertEqual(str(FilePermissions.from_octal(0o640)), 'rw-r-----')

        with self.assertRaises(InvalidPermissionError):
            FilePermissions.from_octal('789')


class TestNodes(unittest.TestCase):
    """Test the directory tree node model."""

    def test_add_and_remove_child(self):
        """Linking sets parent; unlinking clears it."""
        parent = VirtualDirectory('parent')
        child = VirtualFile('child.txt', content='data')

        parent.add_child(child)
        self.assertIs(child.parent, parent)
        self.assertIs(parent.get_child('child.txt'), child)

        self.assertTrue(parent.remove_child('child.txt'))
        self.assertIsNone(child.parent)
        self.assertFalse(parent.remove_child('child.txt'))

    def test_add_child_moves_between_parents(self):
        a = VirtualDirectory('a')
        b = VirtualDirectory('b')
        node = VirtualFile('n')

        a.add_child(node)
        b.add_child(node)

        self.assertNotIn('n', a.children)
        self.assertIs(node.parent, b)

    def test_add_child_stamps_modified(self):
        directory = VirtualDirectory('d')
        directory.modified = 0.0
        directory.add_child(VirtualFile('f'))
        self.assertGreater(directory.modified, 0.0)

    def test_file_content(self):
        """String content is stored as UTF-8 bytes."""
        f = VirtualFile('f.txt', content='héllo')
        self.assertEqual(f.get_content(), 'héllo'.encode('utf-8'))
        self.assertEqual(f.size(), len('héllo'.encode('utf-8')))

        f.append_content(b'!')
        self.assertTrue(f.get_content().endswith(b'!'))
        self.assertEqual(f.type(), NodeType.FILE)

    def test_directory_size_is_recursive(self):
        root = VirtualDirectory('/')
        sub = VirtualDirectory('sub')
        root.add_child(sub)
        root.add_child(VirtualFile('a', content=b'12345'))
        sub.add_child(VirtualFile('b', content=b'123'))

        self.assertEqual(root.size(), 8)
        self.assertEqual(sub.size(), 3)

    def test_clone_is_deep_and_detached(self):
        root = VirtualDirectory('/')
        docs = VirtualDirectory('docs')
        root.add_child(docs)
        note = VirtualFile('note.txt', content='original')
        docs.add_child(note)

        copy = docs.clone()

        self.assertIsNone(copy.parent)
        copied_note = copy.get_child('note.txt')
        self.assertIsNot(copied_note, note)
        self.assertIs(copied_note.parent, copy)

        copied_note.set_content('changed')
        self.assertEqual(note.get_content(), b'original')

    def test_path_property(self):
        root = VirtualDirectory('/')
        home = VirtualDirectory('home')
        root.add_child(home)
        f = VirtualFile('x')
        home.add_child(f)

        self.assertEqual(root.path, '/')
        self.assertEqual(f.path, '/home/x')

    def test_deep_tree_does_not_recurse(self):
        """size() and clone() work on trees deeper than the recursion limit."""
        depth = sys.getrecursionlimit() + 200
        root = VirtualDirectory('/')
        current = root
        for i in range(depth):
            child = VirtualDirectory(f'd{i}')
            current.add_child(child)
            current = child
        current.add_child(VirtualFile('leaf', content=b'xy'))

        self.assertEqual(root.size(), 2)
        copy = root.clone()
        self.assertEqual(copy.size(), 2)


class TestPathResolver(unittest.TestCase):
    """Test path arithmetic."""

    def test_resolve(self):
        self.assertEqual(PathResolver.resolve('docs', '/home/user'), '/home/user/docs')
        self.assertEqual(PathResolver.resolve('../docs', '/home/user'), '/home/docs')
        self.assertEqual(PathResolver.resolve('/a/./b//c/', '/x'), '/a/b/c')
        self.assertEqual(PathResolver.resolve('.', '/'), '/')

    def test_dotdot_at_root(self):
        self.assertEqual(PathResolver.resolve('../../..', '/home/user'), '/')
        self.assertEqual(PathResolver.normalize('/..'), '/')

    def test_split(self):
        self.assertEqual(PathResolver.split('/home/user/file.txt'), ('/home/user', 'file.txt'))
        self.assertEqual(PathResolver.split('/top'), ('/', 'top'))
        self.assertEqual(PathResolver.basename('/'), '')

    def test_join(self):
        self.assertEqual(PathResolver.join('/home', 'user', 'docs'), '/home/user/docs')
        self.assertEqual(PathResolver.join('/home', '/etc'), '/etc')

    def test_is_ancestor(self):
        self.assertTrue(PathResolver.is_ancestor('/a', '/a/b'))
        self.assertTrue(PathResolver.is_ancestor('/a', '/a'))
        self.assertFalse(PathResolver.is_ancestor('/a', '/ab'))
        self.assertTrue(PathResolver.is_ancestor('/', '/anything'))

    def test_depth(self):
        self.assertEqual(PathResolver.get_depth('/'), 0)
        self.assertEqual(PathResolver.get_depth('/a/b/c'), 3)


class TestVirtualFileSystem(unittest.TestCase):
    """Test filesystem operations."""

    def setUp(self):
        self.vfs = VirtualFileSystem()

    def test_initial_layout(self):
        """A new session starts in the home directory with the default tree."""
        self.assertEqual(self.vfs.get_current_path(), '/home/user')
        for path in ('/home/user/missions', '/home/user/docs', '/home/user/tools',
                     '/sys', '/net', '/data'):
            self.assertTrue(self.vfs.is_directory(path), path)
        self.assertTrue(self.vfs.is_file('/home/user/README.txt'))

    def test_custom_layout(self):
        config = FilesystemConfig(
            home_directory='/home/ghost',
            initial_directories=['/srv'],
            welcome_file=None,
        )
        vfs = VirtualFileSystem(config)

        self.assertEqual(vfs.get_current_path(), '/home/ghost')
        self.assertTrue(vfs.is_directory('/srv'))
        self.assertFalse(vfs.exists('/home/ghost/README.txt'))

    def test_empty_filesystem(self):
        vfs = VirtualFileSystem(initialize=False)
        self.assertEqual(vfs.get_current_path(), '/')
        self.assertEqual(vfs.list_directory('/'), [])

    def test_write_then_read(self):
        self.vfs.write_file('notes/todo.txt', 'hack the planet')
        self.assertEqual(self.vfs.read_file('/home/user/notes/todo.txt'), b'hack the planet')

    def test_overwrite(self):
        first = self.vfs.write_file('f.txt', 'one')
        second = self.vfs.write_file('f.txt', 'two')
        self.assertIs(first, second)
        self.assertEqual(self.vfs.read_file('f.txt'), b'two')

    def test_append(self):
        self.vfs.append_file('log.txt', 'a')
        self.vfs.append_file('log.txt', 'b')
        self.assertEqual(self.vfs.read_file('log.txt'), b'ab')

    def test_mkdir_is_idempotent(self):
        first = self.vfs.mkdir('a/b/c')
        second = self.vfs.mkdir('/home/user/a/b/c')
        self.assertIs(first, second)

    def test_mkdir_through_file(self):
        self.vfs.write_file('/data/blob', 'x')
        with self.assertRaises(NotADirectoryError):
            self.vfs.mkdir('/data/blob/sub')
        with self.assertRaises(NotADirectoryError):
            self.vfs.mkdir('/data/blob')

    def test_get_node_never_raises(self):
        self.assertIsNone(self.vfs.get_node('/missing/path'))
        self.assertIsNone(self.vfs.get_node('/home/user/README.txt/child'))

    def test_write_errors(self):
        with self.assertRaises(NotAFileError):
            self.vfs.write_file('/home/user/docs', 'x')
        with self.assertRaises(InvalidPathError):
            self.vfs.write_file('/', 'x')

    def test_read_errors(self):
        with self.assertRaises(FileNotFoundError):
            self.vfs.read_file('nope.txt')
        with self.assertRaises(NotAFileError):
            self.vfs.read_file('/home/user/docs')

    def test_list_directory(self):
        names = [node.name for node in self.vfs.list_directory()]
        self.assertEqual(names, ['missions', 'docs', 'tools', 'README.txt'])

        with self.assertRaises(FileNotFoundError):
            self.vfs.list_directory('/nowhere')
        with self.assertRaises(NotADirectoryError):
            self.vfs.list_directory('README.txt')

    def test_resolve_path(self):
        self.assertEqual(self.vfs.get_current_path(), '/home/user')
        self.assertEqual(self.vfs.resolve_path('./a/../b'), '/home/user/b')
        self.assertEqual(self.vfs.resolve_path('..'), '/home')
        self.assertEqual(self.vfs.resolve_path('/../..'), '/')

    def test_change_directory(self):
        self.vfs.change_directory('docs')
        self.assertEqual(self.vfs.get_current_path(), '/home/user/docs')

        self.vfs.change_directory('../../..')
        self.assertEqual(self.vfs.get_current_path(), '/')

        with self.assertRaises(FileNotFoundError):
            self.vfs.change_directory('/nowhere')
        with self.assertRaises(NotADirectoryError):
            self.vfs.change_directory('/home/user/README.txt')

    def test_delete(self):
        self.vfs.write_file('tmp.txt', 'x')
        self.vfs.delete_node('tmp.txt')
        self.assertFalse(self.vfs.exists('tmp.txt'))

        with self.assertRaises(FileNotFoundError):
            self.vfs.delete_node('tmp.txt')
        with self.assertRaises(FileNotFoundError):
            self.vfs.delete_node('/missing/parent/file')
        with self.assertRaises(RootOperationError):
            self.vfs.delete_node('/')

    def test_delete_current_directory_moves_to_parent(self):
        self.vfs.change_directory('/home/user/docs')
        self.vfs.delete_node('/home/user')

        self.assertEqual(self.vfs.get_current_path(), '/home')
        self.assertFalse(self.vfs.exists('/home/user'))

    def test_copy_file_and_directory(self):
        self.vfs.write_file('docs/a.txt', 'alpha')

        self.vfs.copy_node('docs/a.txt', 'b.txt')
        self.assertEqual(self.vfs.read_file('b.txt'), b'alpha')

        self.vfs.copy_node('docs', 'missions')
        self.assertEqual(self.vfs.read_file('missions/docs/a.txt'), b'alpha')

        self.vfs.write_file('docs/a.txt', 'changed')
        self.assertEqual(self.vfs.read_file('missions/docs/a.txt'), b'alpha')

    def test_copy_errors(self):
        with self.assertRaises(FileNotFoundError):
            self.vfs.copy_node('ghost.txt', 'x')
        with self.assertRaises(InvalidPathError):
            self.vfs.copy_node('/home/user', '/home/user/docs')

        self.vfs.mkdir('missions/docs')
        with self.assertRaises(FileExistsError):
            self.vfs.copy_node('docs', 'missions')

    def test_move(self):
        self.vfs.write_file('a.txt', 'payload')
        moved = self.vfs.move_node('a.txt', 'docs')

        self.assertFalse(self.vfs.exists('a.txt'))
        self.assertEqual(moved.path, '/home/user/docs/a.txt')

        self.vfs.move_node('docs/a.txt', 'docs/b.txt')
        self.assertEqual(self.vfs.read_file('docs/b.txt'), b'payload')

    def test_move_errors(self):
        with self.assertRaises(RootOperationError):
            self.vfs.move_node('/', '/data')
        with self.assertRaises(InvalidPathError):
            self.vfs.move_node('/home', '/home/user/tools')

    def test_move_carries_current_directory(self):
        self.vfs.change_directory('docs')
        self.vfs.move_node('/home/user/docs', '/data/archive')
        self.assertEqual(self.vfs.get_current_path(), '/data/archive')

    def test_chmod_and_chown(self):
        self.vfs.chmod('README.txt', '700')
        self.assertEqual(str(self.vfs.get_node('README.txt').permissions), 'rwx------')

        self.vfs.chmod('README.txt', 'r--r--r--')
        self.assertEqual(self.vfs.get_node('README.txt').permissions.to_octal(), 0o444)

        self.vfs.chown('README.txt', 'root', 'sys')
        node = self.vfs.get_node('README.txt')
        self.assertEqual((node.owner, node.group), ('root', 'sys'))

    def test_walk_is_preorder(self):
        vfs = VirtualFileSystem(initialize=False)
        vfs.mkdir('/a/b')
        vfs.write_file('/a/f', 'x')
        vfs.mkdir('/c')

        paths = [path for path, _ in vfs.walk('/')]
        self.assertEqual(paths, ['/', '/a', '/a/b', '/a/f', '/c'])

    def test_stats(self):
        stats = self.vfs.get_stats()
        self.assertEqual(stats['directories'], 9)
        self.assertEqual(stats['files'], 1)
        self.assertEqual(stats['cwd'], '/home/user')
        self.assertEqual(stats['max_depth'], 3)


class TestFileSystemEvents(unittest.TestCase):
    """Test observer notifications."""

    def setUp(self):
        self.vfs = VirtualFileSystem()
        self.events = []

    def _record(self, payload):
        self.events.append(payload)

    def test_directory_changed(self):
        self.vfs.subscribe(FileSystemEvent.DIRECTORY_CHANGED, self._record)
        self.vfs.change_directory('/data')

        self.assertEqual(len(self.events), 1)
        self.assertEqual(self.events[0]['path'], '/data')
        self.assertEqual(self.events[0]['previous'], '/home/user')

    def test_created_and_modified(self):
        self.vfs.subscribe('node-created', self._record)
        self.vfs.subscribe('node-modified', self._record)
        self.vfs.write_file('new.txt', 'x')

        kinds = [event['event'] for event in self.events]
        self.assertEqual(kinds, ['node-created', 'node-modified'])
        self.assertEqual(self.events[0]['path'], '/home/user/new.txt')

    def test_deleted(self):
        self.vfs.subscribe(FileSystemEvent.NODE_DELETED, self._record)
        self.vfs.delete_node('README.txt')
        self.assertEqual(self.events[0]['path'], '/home/user/README.txt')

    def test_unsubscribe(self):
        self.vfs.subscribe(FileSystemEvent.NODE_ACCESSED, self._record)
        self.assertTrue(self.vfs.unsubscribe(FileSystemEvent.NODE_ACCESSED, self._record))
        self.assertFalse(self.vfs.unsubscribe(FileSystemEvent.NODE_ACCESSED, self._record))

        self.vfs.read_file('README.txt')
        self.assertEqual(self.events, [])

    def test_observer_errors_are_contained(self):
        def broken(payload):
            raise RuntimeError("observer failure")

        self.vfs.subscribe(FileSystemEvent.DIRECTORY_CHANGED, broken)
        self.vfs.subscribe(FileSystemEvent.DIRECTORY_CHANGED, self._record)

        self.vfs.change_directory('/sys')

        self.assertEqual(self.vfs.get_current_path(), '/sys')
        self.assertEqual(len(self.events), 1)


if __name__ == '__main__':
    unittest.main()
