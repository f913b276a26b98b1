"""
Forum reply tree assembly

Turns the flat list of replies loaded for a post into a forest of
top-level comments with their nested replies. The tree is rebuilt from
scratch on every read; nothing is cached between calls.
"""
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from pydantic import BaseModel

logger = logging.getLogger(__name__)

CYCLE_DETECTED = "cycle_detected"

_ATTACHED = "attached"
_ORPHAN = "orphan"
_CYCLE = "cycle"


class ReplyTreeError(Exception):
    pass


class CycleDetected(ReplyTreeError):
    kind = CYCLE_DETECTED

    def __init__(self, reply_ids: List[Any]):
        self.reply_ids = reply_ids
        super().__init__(f"Parent links of replies {reply_ids} loop back on themselves")


class ReplyRecord(BaseModel):
    id: Any
    parent_id: Optional[Any] = None
    created_at: datetime
    content: Any = None
    author: Any = None

    class Config:
        from_attributes = True
        frozen = True


class ReplyNode:
    """A reply and its direct answers, ordered by (created_at, id)"""

    __hash__ = None

    def __init__(self, record: ReplyRecord, children: Optional[List["ReplyNode"]] = None):
        self.record = record
        self.children = children if children is not None else []

    @property
    def reply_count(self) -> int:
        """Number of replies nested anywhere below this node"""
        return count_replies(self.children)

    def __eq__(self, other):
        # Level by level, so threads of any depth compare without recursion
        if not isinstance(other, ReplyNode):
            return NotImplemented
        pairs = [(self, other)]
        while pairs:
            left, right = pairs.pop()
            if left.record != right.record or len(left.children) != len(right.children):
                return False
            pairs.extend(zip(left.children, right.children))
        return True

    def __repr__(self):
        return f"ReplyNode(id={self.record.id!r}, children={len(self.children)})"


class SkippedReply(BaseModel):
    record: ReplyRecord
    reason: str


class Forest(BaseModel):
    roots: List[ReplyNode] = []
    total_count: int = 0
    orphan_count: int = 0
    orphans: List[ReplyRecord] = []
    skipped: List[SkippedReply] = []

    class Config:
        arbitrary_types_allowed = True


def _sort_key(record: ReplyRecord):
    created_at = record.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return (created_at.astimezone(timezone.utc), record.id)


def _resolve(record: ReplyRecord, by_id: Dict[Any, ReplyRecord], status: Dict[Any, str]):
    """
    Walk up the parent chain of `record` and mark every reply on the way as
    attached (reaches a top-level comment), orphan (reaches a missing parent)
    or cycle (revisits a reply already on the walk).
    """
    path = []
    on_path = set()
    current = record

    while True:
        if current.id in status:
            outcome = status[current.id]
            break
        if current.id in on_path:
            outcome = _CYCLE
            break
        path.append(current.id)
        on_path.add(current.id)
        if current.parent_id is None:
            outcome = _ATTACHED
            break
        parent = by_id.get(current.parent_id)
        if parent is None:
            outcome = _ORPHAN
            break
        current = parent

    for reply_id in path:
        status[reply_id] = outcome

    if outcome == _CYCLE:
        raise CycleDetected(path)


def build_forest(records: Iterable[ReplyRecord]) -> Forest:
    """
    Build the reply forest for one post.

    Replies whose parent is not in the input are orphans: they, and any
    replies beneath them, are left out of the tree and counted in
    orphan_count. Replies caught in (or hanging off) a parent cycle are
    reported in `skipped`. Siblings are ordered by (created_at, id).
    """
    records = list(records)

    by_id: Dict[Any, ReplyRecord] = {}
    for record in records:
        if record.id in by_id:
            raise ValueError(f"Duplicate reply id {record.id!r}")
        by_id[record.id] = record

    children: Dict[Any, List[ReplyRecord]] = defaultdict(list)
    for record in records:
        if record.parent_id is not None:
            children[record.parent_id].append(record)

    status: Dict[Any, str] = {}
    for record in records:
        if record.id in status:
            continue
        try:
            _resolve(record, by_id, status)
        except CycleDetected as e:
            logger.warning(f"Skipping replies with cyclic parents: {e.reply_ids}")

    forest = Forest()
    nodes: Dict[Any, ReplyNode] = {}
    for record in records:
        outcome = status[record.id]
        if outcome == _ATTACHED:
            nodes[record.id] = ReplyNode(record=record)
        elif outcome == _ORPHAN:
            forest.orphans.append(record)
        else:
            forest.skipped.append(SkippedReply(record=record, reason=CycleDetected.kind))

    for reply_id, node in nodes.items():
        kids = sorted(children.get(reply_id, []), key=_sort_key)
        node.children = [nodes[kid.id] for kid in kids]

    top_level = sorted((r for r in records if r.parent_id is None), key=_sort_key)
    forest.roots = [nodes[r.id] for r in top_level]
    forest.total_count = len(nodes)
    forest.orphan_count = len(forest.orphans)

    if forest.orphans:
        logger.info(f"{forest.orphan_count} replies reference a parent outside the loaded set")

    return forest


def walk(roots: List[ReplyNode]) -> Iterator[Tuple[ReplyNode, int]]:
    """Pre-order walk yielding each node with its depth (0 for top-level comments)"""
    stack = [(node, 0) for node in reversed(roots)]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        stack.extend((child, depth + 1) for child in reversed(node.children))


def flatten(roots: List[ReplyNode]) -> List[ReplyRecord]:
    """Pre-order listing of every record in the forest"""
    return [node.record for node, _ in walk(roots)]


def count_replies(roots: List[ReplyNode]) -> int:
    count = 0
    stack = list(roots)
    while stack:
        node = stack.pop()
        count += 1
        stack.extend(node.children)
    return count
