"""Bidirectional mapping between filesystem paths and wiki identifiers.

A path is a slash-delimited sequence of segments; an identifier is the same
sequence joined with colons, case preserved. In page mode every path ends
with a fixed extension that does not appear in the identifier.
"""

from typing import List

from .errors import InvalidPathError
from .models import Mode

DEFAULT_PAGE_EXTENSION = ".dw"


def split_path(path: str) -> List[str]:
    """Split a slash-delimited path into its segments.

    Leading, trailing and repeated slashes are ignored, so "/", "" and "//"
    all denote the root (an empty list).

    Examples:
        >>> split_path("/wiki/syntax.dw")
        ['wiki', 'syntax.dw']
        >>> split_path("/")
        []
    """
    return [segment for segment in path.split('/') if segment]


class IdentifierCodec:
    """Converts between filesystem paths and colon-delimited identifiers.

    Conversion rules:
    - "/" separates path segments, ":" separates identifier segments
    - Page mode: the page extension is stripped from the last path segment
      to form the identifier and appended again to form the path
    - Media mode: paths and identifiers differ only in the delimiter

    Examples (page mode, extension ".dw"):
        - "/wiki/syntax.dw" <-> "wiki:syntax"
        - "/start.dw" <-> "start"

    Example (media mode):
        - "/wiki/logo.png" <-> "wiki:logo.png"
    """

    def __init__(self, mode: Mode = Mode.PAGES, page_extension: str = DEFAULT_PAGE_EXTENSION):
        if mode == Mode.PAGES and not page_extension:
            raise ValueError("page mode requires a non-empty page extension")
        self.mode = Mode(mode)
        self.page_extension = page_extension if self.mode == Mode.PAGES else ""

    def is_valid_path(self, path: str) -> bool:
        """Return True if path maps to an identifier in this mode."""
        try:
            self.path_to_id(path)
        except InvalidPathError:
            return False
        return True

    def path_to_id(self, path: str) -> str:
        """Convert a filesystem path to a remote identifier.

        Args:
            path: Absolute or relative slash-delimited path

        Returns:
            The colon-delimited identifier

        Raises:
            InvalidPathError: If the path is the root, contains a colon, or
                lacks the page extension in page mode

        Examples:
            >>> IdentifierCodec(Mode.PAGES).path_to_id("/wiki/syntax.dw")
            'wiki:syntax'
        """
        segments = split_path(path)
        if not segments:
            raise InvalidPathError(path, "the root has no identifier")

        if any(':' in segment for segment in segments):
            raise InvalidPathError(path, "path segments must not contain ':'")

        if self.page_extension:
            name = segments[-1]
            if not name.endswith(self.page_extension) or len(name) == len(self.page_extension):
                raise InvalidPathError(path, f"page paths must end with {self.page_extension!r}")
            segments[-1] = name[:-len(self.page_extension)]

        return ':'.join(segments)

    def id_to_path(self, identifier: str) -> str:
        """Convert a remote identifier to an absolute filesystem path.

        Examples:
            >>> IdentifierCodec(Mode.PAGES).id_to_path("wiki:syntax")
            '/wiki/syntax.dw'
        """
        segments = [segment for segment in identifier.split(':') if segment]
        if not segments:
            raise InvalidPathError(identifier, "empty identifier")
        return '/' + '/'.join(segments) + self.page_extension
