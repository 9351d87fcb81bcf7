"""Materialize a content-addressed graph as a directory of JSON files.

Each distinct reference reachable from the root is fetched once and written to
its own file. Link pointers whose targets were written earlier in the run are
rewritten to ``{"path": "./<file>"}``; every other pointer is left as it was.

File names:
- root: ``<data group reference>.json`` when the root's ``label`` maps through
  the label lookup, otherwise ``<reference>.json``
- child: ``<relationship>_<key>.json``, or ``<relationship>.json`` without a key

A name already claimed by another reference in the same directory gets a
``_<last 8 reference chars>`` suffix. Relationship names and keys come from
fetched content, so path separators and control characters in them are
replaced by ``_`` and over-long names are cut short.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final

from .errors import FetchFailedError, GraphError, NetworkError, UnsafeFilenameError
from .json_values import as_object, link_target, rewrite_links
from .references import is_valid_reference, normalize_key, require_reference

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .json_values import JsonValue
    from .ports import ContentFetcher, LabelLookup

log = getLogger(__name__)

RELATIONSHIPS_KEY: Final[str] = "relationships"
JSON_SUFFIX: Final[str] = ".json"
MAX_FILENAME_BYTES: Final[int] = 255
_COLLISION_SUFFIX_LENGTH: Final[int] = 8
_UNSAFE_FILENAME_CHARS = re.compile(r"[\x00-\x1f\x7f/\\]")


@dataclass(frozen=True, slots=True)
class ChildLink:
    reference: str
    relationship: str
    key: str = ""


@dataclass(frozen=True, slots=True)
class TransactionItem:
    """One submitted data item: a group, the item within it, and its content.

    Keys may be 32-byte hex digests (as stored on chain) or references.
    """

    group_key: str
    item_key: str
    content_ref: str


@dataclass(frozen=True, slots=True)
class MaterializationReport:
    processed: int
    written: int
    failed: int


@dataclass(slots=True)
class TraversalState:
    """Bookkeeping for one materialization run.

    ``owners`` maps each file name in the output directory to the reference
    written there. Runs that write into the same directory share it.
    """

    visited: set[str] = field(default_factory=set[str])
    paths: dict[str, str] = field(default_factory=dict[str, str])
    owners: dict[str, str] = field(default_factory=dict[str, str])
    written: int = 0
    failed: int = 0

    def claim(self, filename: str, reference: str) -> str:
        owner = self.owners.get(filename)
        if owner is not None and owner != reference:
            stem = filename.removesuffix(JSON_SUFFIX)
            suffixed = f"{stem}_{reference[-_COLLISION_SUFFIX_LENGTH:]}{JSON_SUFFIX}"
            log.warning(
                "File name %s already used by %s, writing %s as %s",
                filename,
                owner,
                reference,
                suffixed,
            )
            filename = suffixed
        self.owners[filename] = reference
        return filename

    def report(self) -> MaterializationReport:
        return MaterializationReport(
            processed=len(self.visited),
            written=self.written,
            failed=self.failed,
        )


class GraphMaterializer:
    """Walks a graph depth-first and writes each node below an output directory."""

    def __init__(
        self,
        *,
        fetcher: ContentFetcher,
        labels: LabelLookup | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._labels = labels
        self.last_report: MaterializationReport | None = None

    async def reconstruct(self, root_ref: str, output_dir: Path | str) -> Path:
        """Materialize the graph below ``root_ref`` into ``output_dir/root_ref``.

        Raises ``InvalidReferenceError`` before any fetch when ``root_ref`` does
        not parse, and ``FetchFailedError`` when the root itself cannot be
        fetched. Failed nested branches are logged and left out.
        """

        require_reference(root_ref)

        data_dir = Path(output_dir) / root_ref
        data_dir.mkdir(parents=True, exist_ok=True)
        log.info("Created directory: %s", data_dir)

        state = TraversalState()
        result = await self._process_node(root_ref, data_dir, state)
        self.last_report = state.report()

        if result is None:
            _remove_if_empty(data_dir)
            raise FetchFailedError(root_ref)

        log.info("Processing complete. Data saved in: %s", data_dir)
        log.info(
            "Total references processed: %s (written=%s, failed=%s)",
            self.last_report.processed,
            self.last_report.written,
            self.last_report.failed,
        )
        return data_dir

    async def reconstruct_from_items(
        self,
        items: Iterable[TransactionItem],
        output_dir: Path | str,
    ) -> list[Path]:
        """Materialize decoded submission items, one directory per group.

        The root file of each item is named after its item key. Items of one
        group share the file name registry of their directory, so a child name
        used by an earlier item is suffixed instead of overwritten. Failures
        are logged per item and do not stop the run.
        """

        items_by_group: dict[str, list[TransactionItem]] = {}
        for item in items:
            items_by_group.setdefault(item.group_key, []).append(item)

        log.info("Processing %s unique groups", len(items_by_group))

        directories: list[Path] = []
        for group_key, group_items in items_by_group.items():
            try:
                group_ref = normalize_key(group_key)
            except GraphError as exc:
                log.error("Skipping group %s: %s", group_key, exc)
                continue

            group_dir = Path(output_dir) / group_ref
            group_dir.mkdir(parents=True, exist_ok=True)
            directories.append(group_dir)
            log.info("Processing group %s (%s items)", group_ref, len(group_items))

            owners: dict[str, str] = {}
            for item in group_items:
                try:
                    await self._process_item(item, group_dir, owners)
                except (GraphError, OSError) as exc:
                    log.error("Error processing item %s: %s", item.content_ref, exc)

        log.info("Item reconstruction complete. Data saved in: %s", output_dir)
        return directories

    async def _process_item(
        self,
        item: TransactionItem,
        group_dir: Path,
        owners: dict[str, str],
    ) -> None:
        item_ref = normalize_key(item.item_key)
        content_ref = normalize_key(item.content_ref)

        content = await self._fetcher.fetch(content_ref)

        state = TraversalState(owners=owners)
        state.visited.add(content_ref)
        filename = state.claim(safe_filename(item_ref), content_ref)
        await self._process_children(content, filename, group_dir, state)
        self._write(content_ref, filename, content, group_dir, state)
        log.info("Processed item %s with content %s", item_ref, content_ref)

    async def _process_node(
        self,
        reference: str,
        data_dir: Path,
        state: TraversalState,
        parent_relationship: str | None = None,
        parent_key: str = "",
    ) -> str | None:
        if reference in state.visited:
            return state.paths.get(reference)
        state.visited.add(reference)

        log.info("Fetching reference: %s", reference)
        try:
            content = await self._fetcher.fetch(reference)
        except NetworkError as exc:
            log.error("Failed to fetch %s: %s", reference, exc)
            state.failed += 1
            return None

        filename = state.claim(
            self._filename(reference, content, parent_relationship, parent_key),
            reference,
        )
        await self._process_children(content, filename, data_dir, state)
        try:
            return self._write(reference, filename, content, data_dir, state)
        except (OSError, UnsafeFilenameError) as exc:
            if parent_relationship is None:
                raise
            log.error("Failed to write %s as %s: %s", reference, filename, exc)
            state.failed += 1
            return None

    def _filename(
        self,
        reference: str,
        content: JsonValue,
        parent_relationship: str | None,
        parent_key: str,
    ) -> str:
        if parent_relationship is not None:
            filename = safe_filename(
                f"{parent_relationship}_{parent_key}" if parent_key else parent_relationship
            )
            log.debug(
                "Naming file for %s: %s (relationship=%s, key=%s)",
                reference,
                filename,
                parent_relationship,
                parent_key,
            )
            return filename

        data_group_ref = self._lookup_label(content)
        return safe_filename(data_group_ref or reference)

    def _lookup_label(self, content: JsonValue) -> str | None:
        document = as_object(content)
        if document is None or self._labels is None:
            return None
        label = document.get("label")
        if not isinstance(label, str) or not label:
            return None
        data_group_ref = self._labels.data_group_ref(label)
        if data_group_ref is None:
            log.debug("No data group found for label %r", label)
        return data_group_ref

    async def _process_children(
        self,
        content: JsonValue,
        filename: str,
        data_dir: Path,
        state: TraversalState,
    ) -> None:
        stem = filename.removesuffix(JSON_SUFFIX)
        for link in discover_children(content, stem=stem):
            if link.reference in state.visited:
                continue
            await self._process_node(
                link.reference,
                data_dir,
                state,
                parent_relationship=link.relationship,
                parent_key=link.key,
            )

    def _write(
        self,
        reference: str,
        filename: str,
        content: JsonValue,
        data_dir: Path,
        state: TraversalState,
    ) -> str:
        file_path = data_dir / filename
        if file_path.resolve().parent != data_dir.resolve():
            raise UnsafeFilenameError(filename)

        rewritten = rewrite_links(content, state.paths)
        file_path.write_text(json.dumps(rewritten, indent=2, ensure_ascii=False), encoding="utf-8")
        relative_path = f"./{filename}"
        state.paths[reference] = relative_path
        state.written += 1
        log.info("Saved: %s", file_path)
        return relative_path


def safe_filename(stem: str) -> str:
    """Return ``stem`` as a single file name ending in ``.json``.

    Path separators and control characters become ``_``, a stem starting with
    a dot gets a leading ``_``, and the name is cut so that a collision suffix still fits
    within ``MAX_FILENAME_BYTES``.
    """

    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", stem)
    if not cleaned.strip(".") or cleaned.startswith("."):
        cleaned = "_" + cleaned
    limit = MAX_FILENAME_BYTES - len(JSON_SUFFIX) - _COLLISION_SUFFIX_LENGTH - 1
    encoded = cleaned.encode("utf-8")
    if len(encoded) > limit:
        cleaned = encoded[:limit].decode("utf-8", errors="ignore")
    return f"{cleaned}{JSON_SUFFIX}"


def discover_children(content: JsonValue, *, stem: str) -> list[ChildLink]:
    """List the references ``content`` points at, in traversal order.

    ``relationships`` entries come first, named after the relationship. Other
    top-level pointer fields follow, named after ``stem`` and the field.
    Pointers whose targets are not references (e.g. file paths) are skipped.
    """

    document = as_object(content)
    if document is None:
        return []

    links: list[ChildLink] = []
    relationships = as_object(document.get(RELATIONSHIPS_KEY))
    if relationships is not None:
        for name, value in relationships.items():
            links.extend(_relationship_links(name, value))

    for key, value in document.items():
        if key == RELATIONSHIPS_KEY:
            continue
        target = link_target(value)
        if target is not None:
            links.append(ChildLink(target, stem, key))

    return [link for link in links if is_valid_reference(link.reference)]


def _relationship_links(name: str, value: JsonValue) -> Iterator[ChildLink]:
    target = link_target(value)
    if target is not None:
        yield ChildLink(target, name)
        return

    if isinstance(value, dict):
        yield from _named_links(name, value, prefix="")
    elif isinstance(value, list):
        for index, item in enumerate(value):
            item_target = link_target(item)
            if item_target is not None:
                yield ChildLink(item_target, name, str(index))
            elif isinstance(item, dict):
                yield from _named_links(name, item, prefix=f"{index}_")


def _named_links(name: str, value: dict[str, JsonValue], *, prefix: str) -> Iterator[ChildLink]:
    for sub_key, sub_value in value.items():
        target = link_target(sub_value)
        if target is not None:
            yield ChildLink(target, name, f"{prefix}{sub_key}")


def _remove_if_empty(directory: Path) -> None:
    try:
        if not any(directory.iterdir()):
            directory.rmdir()
            log.info("Removed empty directory: %s", directory)
    except OSError as exc:
        log.warning("Could not clean up directory %s: %s", directory, exc)
