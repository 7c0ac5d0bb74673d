"""Remote store calls must never run while the tree lock is held.

Every client method of the mock wiki checks the lock on entry, so any call
made from inside a ``with tree.lock`` block fails the test.
"""

import pytest

from src.wiki_fs.models import Mode, Permission
from src.wiki_fs.wiki_filesystem import WikiFilesystem
from tests.fixtures.wiki_fixtures import NOW, create_mock_api, doc

CLIENT_METHODS = (
    'list_all_pages',
    'list_attachments',
    'get_recent_changes',
    'get_recent_media_changes',
    'get_page',
    'get_attachment',
    'put_page',
    'delete_page',
    'put_attachment',
    'delete_attachment',
    'acl_check',
)


def guard_client(api, tree):
    """Make every client method assert that tree.lock is not held."""
    def guard(method):
        original = method.side_effect

        def checked(*args, **kwargs):
            assert not tree.lock._is_owned(), "remote call made under the tree lock"
            if original is not None:
                return original(*args, **kwargs)
            return method.return_value

        method.side_effect = checked

    for name in CLIENT_METHODS:
        guard(getattr(api, name))


def create_guarded_filesystem(mode=Mode.PAGES, **api_options):
    api = create_mock_api(**api_options)
    filesystem = WikiFilesystem(api, mode=mode, clock=lambda: NOW)
    guard_client(api, filesystem.tree)
    filesystem.mount()
    return filesystem, api


class TestRemoteCallsOutsideLock:
    """Test cases for lock-free remote calls."""

    def test_mount(self):
        """The initial listing is fetched before the lock is taken."""
        fs, api = create_guarded_filesystem(pages=[doc("start")])

        api.list_all_pages.assert_called_once_with()
        assert fs.is_file("/start.dw") is True

    def test_read_content_cache_miss(self):
        """A cache miss fetches without holding the lock."""
        fs, api = create_guarded_filesystem(pages=[doc("start")], contents={"start": b"hello"})

        assert fs.read_content("/start.dw") == b"hello"
        api.get_page.assert_called_once_with("start")

    def test_write_content(self):
        """Saving a page releases the lock around the remote write."""
        fs, api = create_guarded_filesystem(pages=[doc("start")])

        assert fs.write_content("/start.dw", b"% edit\nBody") is True
        api.put_page.assert_called_once()

    def test_summary_only_write_deletes(self):
        """A delete requested through a summary line runs unlocked."""
        fs, api = create_guarded_filesystem(pages=[doc("start")])

        assert fs.write_content("/start.dw", b"% gone\n") is True
        api.delete_page.assert_called_once()

    def test_delete_file(self):
        """Deleting runs the remote call unlocked."""
        fs, api = create_guarded_filesystem(pages=[doc("start")])

        assert fs.delete_file("/start.dw") is True
        api.delete_page.assert_called_once()

    def test_can_write_unknown_path(self):
        """The remote permission check runs unlocked."""
        fs, api = create_guarded_filesystem(acl=int(Permission.CREATE))

        assert fs.can_write("/new.dw") is True
        api.acl_check.assert_called_once_with("new")

    def test_synchronize_with_fetch_to_size(self):
        """Both the change feed and sizing fetches run unlocked."""
        fs, api = create_guarded_filesystem(pages=[doc("start")], contents={"sized": b"12345"})
        api.get_recent_changes.return_value = [
            doc("sized", size=None, version=NOW),
            doc("start", size=0, version=NOW),
        ]

        report = fs.synchronize()

        assert report.completed is True
        assert fs.tree.get_metadata("/sized.dw").size == 5
        api.get_page.assert_called_once_with("sized")

    def test_media_mode(self):
        """Attachment calls follow the same rule."""
        fs, api = create_guarded_filesystem(
            Mode.MEDIA,
            attachments=[doc("wiki:logo.png")],
            contents={"wiki:logo.png": b"\x89PNG"},
        )

        assert fs.read_content("/wiki/logo.png") == b"\x89PNG"
        assert fs.write_content("/wiki/logo.png", b"new") is True
        assert fs.delete_file("/wiki/logo.png") is True
        api.put_attachment.assert_called_once()
        api.delete_attachment.assert_called_once()

    def test_guard_detects_locked_call(self):
        """The guard itself fails a call made under the lock."""
        fs, api = create_guarded_filesystem()

        with fs.tree.lock:
            with pytest.raises(AssertionError):
                api.acl_check("start")
