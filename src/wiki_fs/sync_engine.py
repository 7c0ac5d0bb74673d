"""Initial load and incremental reconciliation of the namespace.

The synchronization engine fills the namespace tree from a full listing
when the wiki is mounted, then merges the wiki's change feed into the tree
and the content cache on every poll.

Network calls are made outside the tree lock; each change item is applied
under the lock on its own, so foreground filesystem calls interleave with a
running reconciliation instead of waiting for all of it.
"""

import logging
import time
from typing import Callable, Optional

from src.wiki_client.errors import WikiError
from src.wiki_client.models import DocumentInfo

from .document_store import DocumentStore
from .errors import InvalidPathError
from .id_codec import IdentifierCodec
from .models import EntryMetadata, SyncReport
from .namespace_tree import NamespaceTree

logger = logging.getLogger(__name__)

# The wiki reports modification times in server-local time of unknown
# offset. Polls start this far behind the newest observed timestamp.
DEFAULT_CLOCK_SKEW = 12 * 60 * 60


class SyncEngine:
    """Keeps the namespace tree consistent with the remote wiki.

    Example:
        >>> engine = SyncEngine(tree, store, codec)
        >>> engine.initial_load()
        42
        >>> report = engine.synchronize()
        >>> print(f"{report.changed} documents changed")
    """

    def __init__(
        self,
        tree: NamespaceTree,
        store: DocumentStore,
        codec: IdentifierCodec,
        clock_skew: int = DEFAULT_CLOCK_SKEW,
        clock: Callable[[], float] = time.time
    ):
        self._tree = tree
        self._store = store
        self._codec = codec
        self.clock_skew = clock_skew
        self._clock = clock

    def initial_load(self) -> int:
        """Populate the tree from the complete document listing.

        The marker is set to the newest modification time seen (the local
        time if the wiki is empty) minus the clock skew allowance. The first
        poll therefore re-reads some known changes; those are no-ops.

        Returns:
            int: Number of entries added

        Raises:
            WikiError: If the listing cannot be fetched
        """
        logger.info(f"Loading {self._store.mode.value} listing")
        documents = self._store.list_all()

        added = 0
        newest: Optional[int] = None
        with self._tree.lock:
            for document in documents:
                try:
                    path = self._codec.id_to_path(document.id)
                except InvalidPathError as e:
                    logger.warning(f"Skipping listing entry: {e}")
                    continue
                if self._tree.add(path, EntryMetadata.from_document(document)):
                    added += 1
                else:
                    logger.warning(f"Listing entry {document.id} conflicts with a directory, skipped")
                if newest is None or document.version > newest:
                    newest = document.version

            base = newest if newest is not None else int(self._clock())
            self._tree.marker = max(base - self.clock_skew, 0)

        logger.info(f"Loaded {added} entries, sync marker {self._tree.marker}")
        return added

    def synchronize(self, stop_event=None) -> SyncReport:
        """Merge remote changes since the marker into tree and cache.

        Changes are applied oldest first and the marker advances after each
        applied item. A remote failure or a set ``stop_event`` ends the pass
        early with the marker at the last applied item; the next pass
        retries from there. This method never raises WikiError.

        Args:
            stop_event: Optional threading.Event checked between items

        Returns:
            SyncReport: Counts and final marker of this pass
        """
        report = SyncReport(marker=self._tree.marker)
        since = self._tree.marker
        logger.debug(f"Polling changes since {since}")

        try:
            changes = self._store.list_changes(since)
        except WikiError as e:
            logger.warning(f"Fetching changes since {since} failed: {e}")
            report.completed = False
            return report

        for document in sorted(changes, key=lambda d: d.version):
            if stop_event is not None and stop_event.is_set():
                logger.info("Synchronization cancelled")
                report.completed = False
                break
            try:
                self._apply(document, report)
            except WikiError as e:
                logger.warning(f"Synchronization stopped at {document.id}: {e}")
                report.completed = False
                break

        report.marker = self._tree.marker
        if report.changed:
            logger.info(
                f"Synchronized: {report.added} added, {report.updated} updated, "
                f"{report.removed} removed"
            )
        logger.debug(f"Sync marker now {report.marker}")
        return report

    def _apply(self, document: DocumentInfo, report: SyncReport) -> None:
        """Apply one changed document.

        Raises:
            WikiError: If sizing the document required a fetch that failed
        """
        try:
            path = self._codec.id_to_path(document.id)
        except InvalidPathError as e:
            logger.warning(f"Skipping change: {e}")
            self._advance(document.version)
            return

        size = document.size
        if size is None:
            # Older wikis omit the size from the change feed
            try:
                size = len(self._store.fetch(document.id))
            except ValueError as e:
                logger.warning(f"Skipping change with rejected identifier: {e}")
                self._advance(document.version)
                return
        metadata = EntryMetadata.from_document(document, size=size)

        with self._tree.lock:
            current = self._tree.get_metadata(path)
            if current is not None:
                if current == metadata:
                    report.unchanged += 1
                else:
                    self._tree.cache.delete(current.identifier)
                    if metadata.size == 0:
                        logger.debug(f"{document.id} deleted remotely")
                        self._tree.remove(path)
                        report.removed += 1
                    else:
                        self._tree.add(path, metadata)
                        report.updated += 1
            elif metadata.size > 0:
                if self._tree.add(path, metadata):
                    report.added += 1
                else:
                    logger.warning(f"Remote document {document.id} conflicts with a local directory")
            self._advance(document.version)

    def _advance(self, version: int) -> None:
        with self._tree.lock:
            if version > self._tree.marker:
                self._tree.marker = version
