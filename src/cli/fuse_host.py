"""FUSE host adapter for a mounted wiki.

Translates kernel filesystem requests, as delivered by fusepy, into calls
on WikiFilesystem and maps their results back to stat structures, byte
strings and errno values.

File content written through the kernel arrives in chunks at arbitrary
offsets. It is collected in a per-path buffer and sent to the wiki as a
whole on flush/release.
"""

import logging
import os
from errno import EACCES, EEXIST, EIO, ENOENT, ENOTEMPTY
from stat import S_IFDIR, S_IFREG
from time import time
from typing import Dict, Set

from fuse import FUSE, FuseOSError, LoggingMixIn, Operations

from src.wiki_fs.wiki_filesystem import WikiFilesystem

logger = logging.getLogger(__name__)


def mount(filesystem: WikiFilesystem, mountpoint: str, foreground: bool = True, **options) -> None:
    """Mount filesystem at mountpoint; returns when it is unmounted.

    Kernel requests are served from a single thread so that one operation
    completes before the next starts.
    """
    FUSE(
        WikiFuseOperations(filesystem),
        mountpoint,
        foreground=foreground,
        nothreads=True,
        fsname="wikifs",
        **options
    )


class WikiFuseOperations(LoggingMixIn, Operations):

    def __init__(self, filesystem: WikiFilesystem) -> None:
        self._fs = filesystem
        self._mount_time = time()
        self._buffers: Dict[str, bytearray] = {}
        self._dirty: Set[str] = set()
        self._last_fd = 0

    ##############################################

    def _next_fd(self) -> int:
        self._last_fd += 1
        return self._last_fd

    def _stat(self, mode: int, size: int, mtime: float, nlink: int = 1) -> dict:
        return dict(
            st_mode=mode,
            st_nlink=nlink,
            st_size=size,
            st_ctime=mtime,
            st_mtime=mtime,
            st_atime=mtime,
            st_uid=os.getuid(),
            st_gid=os.getgid(),
        )

    def _buffer(self, path: str) -> bytearray:
        if path not in self._buffers:
            content = self._fs.read_content(path)
            self._buffers[path] = bytearray(content or b'')
        return self._buffers[path]

    def _commit(self, path: str) -> None:
        if path not in self._dirty:
            return
        content = bytes(self._buffers.get(path, b''))
        if not content.strip():
            # Editors truncate before writing; wait for the real content
            logger.debug(f"Deferring empty write to {path}")
            return
        self._dirty.discard(path)
        if not self._fs.write_content(path, content):
            raise FuseOSError(EIO)

    ##############################################

    def getattr(self, path, fh=None):
        if self._fs.is_directory(path):
            return self._stat(S_IFDIR | 0o755, 4096, self._mount_time, nlink=2)
        if path in self._buffers:
            return self._stat(S_IFREG | 0o644, len(self._buffers[path]), time())
        if self._fs.is_file(path):
            mtime = self._fs.modified(path) or self._mount_time
            return self._stat(S_IFREG | 0o644, self._fs.size(path) or 0, mtime)
        raise FuseOSError(ENOENT)

    def readdir(self, path, fh):
        names = self._fs.list(path)
        if names is None:
            raise FuseOSError(ENOENT)
        parent = path.rstrip('/') or '/'
        pending = [os.path.basename(p) for p in self._buffers if os.path.dirname(p) == parent]
        return ['.', '..'] + sorted(set(names) | set(pending))

    def open(self, path, flags):
        if not self._fs.is_file(path) and path not in self._buffers:
            raise FuseOSError(ENOENT)
        if flags & os.O_ACCMODE in (os.O_WRONLY, os.O_RDWR):
            if not self._fs.can_write(path):
                raise FuseOSError(EACCES)
            if flags & os.O_TRUNC:
                self._buffers[path] = bytearray()
                self._dirty.add(path)
        elif not self._fs.can_read(path):
            raise FuseOSError(EACCES)
        return self._next_fd()

    def create(self, path, mode, fi=None):
        if self._fs.is_directory(path):
            raise FuseOSError(EEXIST)
        if not self._fs.can_write(path):
            raise FuseOSError(EACCES)
        self._buffers[path] = bytearray()
        self._dirty.add(path)
        return self._next_fd()

    def read(self, path, size, offset, fh):
        if path in self._buffers:
            data = bytes(self._buffers[path])
        else:
            data = self._fs.read_content(path)
            if data is None:
                raise FuseOSError(ENOENT)
        return data[offset:offset + size]

    def write(self, path, data, offset, fh):
        buffer = self._buffer(path)
        if offset > len(buffer):
            buffer.extend(b'\x00' * (offset - len(buffer)))
        buffer[offset:offset + len(data)] = data
        self._dirty.add(path)
        return len(data)

    def truncate(self, path, length, fh=None):
        if not self._fs.is_file(path) and path not in self._buffers:
            raise FuseOSError(ENOENT)
        buffer = self._buffer(path)
        if length < len(buffer):
            del buffer[length:]
        else:
            buffer.extend(b'\x00' * (length - len(buffer)))
        self._dirty.add(path)

    def flush(self, path, fh):
        self._commit(path)
        return 0

    def fsync(self, path, datasync, fh):
        self._commit(path)
        return 0

    def release(self, path, fh):
        try:
            self._commit(path)
        finally:
            content = self._buffers.get(path)
            if path not in self._dirty or (content is not None and not bytes(content).strip()):
                # Nothing savable was written; serve the wiki's content again
                self._buffers.pop(path, None)
                self._dirty.discard(path)
        return 0

    def unlink(self, path):
        if not self._fs.is_file(path):
            if self._buffers.pop(path, None) is not None:
                self._dirty.discard(path)
                return
            raise FuseOSError(ENOENT)
        if not self._fs.can_delete(path):
            raise FuseOSError(EACCES)
        if not self._fs.delete_file(path):
            raise FuseOSError(EIO)
        self._buffers.pop(path, None)
        self._dirty.discard(path)

    def mkdir(self, path, mode):
        if self._fs.is_directory(path) or self._fs.is_file(path):
            raise FuseOSError(EEXIST)
        if not self._fs.can_mkdir(path):
            raise FuseOSError(EACCES)
        if not self._fs.make_directory(path):
            raise FuseOSError(ENOENT)

    def rmdir(self, path):
        if not self._fs.is_directory(path):
            raise FuseOSError(ENOENT)
        if not self._fs.can_rmdir(path):
            raise FuseOSError(ENOTEMPTY)
        if not self._fs.remove_directory(path):
            raise FuseOSError(EACCES)

    def utimens(self, path, times=None):
        return 0

    def chmod(self, path, mode):
        return 0

    def chown(self, path, uid, gid):
        return 0
