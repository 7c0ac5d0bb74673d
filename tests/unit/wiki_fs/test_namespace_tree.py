"""Unit tests for wiki_fs.namespace_tree module."""

from src.wiki_fs.content_cache import ContentCache
from src.wiki_fs.models import Mode
from src.wiki_fs.namespace_tree import NamespaceNode, NamespaceTree
from tests.fixtures.wiki_fixtures import meta


class TestAddAndQuery:
    """Test cases for adding entries and structural queries."""

    def setup_method(self):
        self.tree = NamespaceTree(Mode.PAGES)

    def test_empty_tree(self):
        assert self.tree.list("/") == []
        assert self.tree.is_directory("/") is True
        assert self.tree.is_file("/") is False

    def test_add_creates_parent_directories(self):
        """Adding /test/page exposes 'test' at the root."""
        assert self.tree.add("/test/page.dw", meta("test:page")) is True
        assert self.tree.list("/") == ["test"]
        assert self.tree.list("/test") == ["page.dw"]
        assert self.tree.is_directory("/test") is True
        assert self.tree.is_file("/test/page.dw") is True

    def test_list_sorted_union(self):
        self.tree.add("/b.dw", meta("b"))
        self.tree.add("/a/x.dw", meta("a:x"))
        self.tree.add("/c/y.dw", meta("c:y"))
        assert self.tree.list("/") == ["a", "b.dw", "c"]

    def test_list_of_file_is_none(self):
        self.tree.add("/start.dw", meta("start"))
        assert self.tree.list("/start.dw") is None
        assert self.tree.list("/missing") is None

    def test_get_metadata(self):
        metadata = meta("wiki:syntax", size=42)
        self.tree.add("/wiki/syntax.dw", metadata)
        assert self.tree.get_metadata("/wiki/syntax.dw") == metadata
        assert self.tree.get_metadata("/wiki") is None
        assert self.tree.get_metadata("/nothing.dw") is None

    def test_add_replaces_entry(self):
        self.tree.add("/start.dw", meta("start", size=1))
        self.tree.add("/start.dw", meta("start", size=2))
        assert self.tree.get_metadata("/start.dw").size == 2
        assert self.tree.list("/") == ["start.dw"]

    def test_add_root_fails(self):
        assert self.tree.add("/", meta("x")) is False

    def test_add_over_directory_fails(self):
        """A name is never both a file and a directory."""
        self.tree.add("/wiki/syntax.dw", meta("wiki:syntax"))
        assert self.tree.add("/wiki", meta("wiki")) is False
        assert self.tree.is_directory("/wiki") is True

    def test_add_below_file_fails(self):
        self.tree.add("/start", meta("start"))
        assert self.tree.add("/start/page.dw", meta("start:page")) is False
        assert self.tree.is_file("/start") is True

    def test_path_through_file_does_not_resolve(self):
        self.tree.add("/start", meta("start"))
        assert self.tree.is_file("/start/x") is False
        assert self.tree.is_directory("/start/x") is False
        assert self.tree.list("/start/x") is None

    def test_walk(self):
        self.tree.add("/a.dw", meta("a"))
        self.tree.add("/ns/b.dw", meta("ns:b"))
        paths = sorted(path for path, _ in self.tree.walk())
        assert paths == ["/a.dw", "/ns/b.dw"]


class TestRemove:
    """Test cases for removing entries."""

    def setup_method(self):
        self.tree = NamespaceTree(Mode.PAGES)

    def test_remove_keeps_parent_directory(self):
        self.tree.add("/test/page.dw", meta("test:page"))
        removed = self.tree.remove("/test/page.dw")
        assert removed == meta("test:page")
        assert self.tree.list("/") == ["test"]
        assert self.tree.list("/test") == []
        assert self.tree.can_rmdir("/test") is True

    def test_remove_missing_returns_none(self):
        assert self.tree.remove("/nothing.dw") is None
        assert self.tree.remove("/a/b/c.dw") is None

    def test_remove_does_not_remove_directory(self):
        self.tree.add("/ns/page.dw", meta("ns:page"))
        assert self.tree.remove("/ns") is None
        assert self.tree.is_directory("/ns") is True


class TestDirectories:
    """Test cases for mkdir, can_rmdir and rmdir."""

    def setup_method(self):
        self.tree = NamespaceTree(Mode.PAGES)

    def test_mkdir(self):
        assert self.tree.mkdir("/new") is True
        assert self.tree.is_directory("/new") is True
        assert self.tree.list("/new") == []

    def test_mkdir_requires_parent(self):
        assert self.tree.mkdir("/a/b") is False
        assert self.tree.is_directory("/a") is False

    def test_mkdir_existing_name_fails(self):
        self.tree.add("/start.dw", meta("start"))
        self.tree.mkdir("/ns")
        assert self.tree.mkdir("/start.dw") is False
        assert self.tree.mkdir("/ns") is False

    def test_mkdir_root_fails(self):
        assert self.tree.mkdir("/") is False

    def test_transitively_empty_directory_removable(self):
        """A/B/C with no entries can be removed from A."""
        self.tree.mkdir("/a")
        self.tree.mkdir("/a/b")
        self.tree.mkdir("/a/b/c")
        assert self.tree.can_rmdir("/a") is True
        assert self.tree.rmdir("/a") is True
        assert self.tree.list("/") == []

    def test_directory_with_nested_entry_not_removable(self):
        self.tree.add("/a/b/c/page.dw", meta("a:b:c:page"))
        assert self.tree.can_rmdir("/a") is False
        assert self.tree.rmdir("/a") is False
        assert self.tree.is_file("/a/b/c/page.dw") is True

    def test_rmdir_on_file_fails(self):
        self.tree.add("/start.dw", meta("start"))
        assert self.tree.can_rmdir("/start.dw") is False
        assert self.tree.rmdir("/start.dw") is False

    def test_rmdir_missing_fails(self):
        assert self.tree.can_rmdir("/nothing") is False
        assert self.tree.rmdir("/nothing") is False

    def test_root_never_removed(self):
        assert self.tree.can_rmdir("/") is True
        assert self.tree.rmdir("/") is False
        assert self.tree.is_directory("/") is True


class TestSharedState:
    """Test cases for state owned by the root."""

    def test_defaults(self):
        tree = NamespaceTree()
        assert tree.mode == Mode.PAGES
        assert tree.marker == 0
        assert isinstance(tree.cache, ContentCache)

    def test_lock_is_reentrant(self):
        tree = NamespaceTree(Mode.MEDIA)
        with tree.lock:
            with tree.lock:
                assert tree.add("/logo.png", meta("logo.png")) is True

    def test_clear_drops_entries_and_cache(self):
        tree = NamespaceTree(Mode.PAGES, ContentCache(100))
        tree.add("/start.dw", meta("start"))
        tree.cache.put("start", b"content")
        tree.clear()
        assert tree.list("/") == []
        assert len(tree.cache) == 0


class TestNamespaceNode:
    """Test cases for the recursive node structure."""

    def test_entries_and_children_stay_disjoint(self):
        node = NamespaceNode()
        node.add(["a", "b"], meta("a:b"))
        node.add(["c"], meta("c"))
        assert set(node.entries) == {"c"}
        assert set(node.children) == {"a"}
        assert node.add(["a"], meta("a")) is False
        assert node.add(["c", "d"], meta("c:d")) is False

    def test_is_empty_is_transitive(self):
        node = NamespaceNode()
        node.mkdir(["a"])
        node.mkdir(["a", "b"])
        assert node.is_empty() is True
        node.add(["a", "b", "c"], meta("a:b:c"))
        assert node.is_empty() is False
