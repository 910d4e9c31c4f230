"""Append-only incremental Merkle tree and witnesses over 32-byte hashes."""

from __future__ import annotations

from collections import deque
from functools import lru_cache
from typing import BinaryIO, Iterable, List, Optional

from zshield.encoding import SerializationError
from zshield.prf import sha256_compress
from zshield.serialize import Boolean, FixedBytes, Nested, OptionalOf, VectorOf
from zshield.util import bytes_to_bits

HASH_SIZE = 32
INCREMENTAL_MERKLE_TREE_DEPTH = 29
INCREMENTAL_MERKLE_TREE_DEPTH_TESTING = 4

_HASH = FixedBytes(HASH_SIZE)
_OPT_HASH = OptionalOf(_HASH)
_PARENTS = VectorOf(_OPT_HASH)
_HASHES = VectorOf(_HASH)
_BITS = VectorOf(Boolean())
_BIT_VECTORS = VectorOf(_BITS)


def _check_hash(value: bytes) -> bytes:
    value = bytes(value)
    if len(value) != HASH_SIZE:
        raise ValueError(f"hash must be {HASH_SIZE} bytes, got {len(value)}")
    return value


def combine(a: bytes, b: bytes) -> bytes:
    """Hash two child nodes into their parent."""
    return sha256_compress(_check_hash(a) + _check_hash(b))


@lru_cache(maxsize=None)
def _empty_roots(depth: int) -> tuple:
    roots = [bytes(HASH_SIZE)]
    for _ in range(depth):
        roots.append(combine(roots[-1], roots[-1]))
    return tuple(roots)


class MerklePath:
    """Authentication path from the root down, with left/right index bits."""

    def __init__(self, authentication_path: Iterable[Iterable[bool]] = (), index: Iterable[bool] = ()) -> None:
        self.authentication_path: List[List[bool]] = [list(map(bool, p)) for p in authentication_path]
        self.index: List[bool] = list(map(bool, index))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MerklePath):
            return NotImplemented
        return self.authentication_path == other.authentication_path and self.index == other.index

    def __repr__(self) -> str:
        return f"MerklePath(depth={len(self.index)})"

    def serialize(self, stream: BinaryIO) -> None:
        _BIT_VECTORS.write(stream, self.authentication_path)
        _BITS.write(stream, self.index)

    @classmethod
    def deserialize(cls, stream: BinaryIO) -> "MerklePath":
        path = _BIT_VECTORS.read(stream)
        index = _BITS.read(stream)
        return cls(path, index)


class EmptyMerkleRoots:
    """Roots of entirely empty subtrees of every height up to ``depth``."""

    def __init__(self, depth: int) -> None:
        self.depth = depth
        self._roots = _empty_roots(depth)

    def empty_root(self, depth: int) -> bytes:
        if not 0 <= depth <= self.depth:
            raise IndexError(f"no empty root at depth {depth}")
        return self._roots[depth]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EmptyMerkleRoots):
            return NotImplemented
        return self._roots == other._roots


class _PathFiller:
    def __init__(self, roots: EmptyMerkleRoots, hashes: Iterable[bytes] = ()) -> None:
        self._roots = roots
        self._queue = deque(hashes)

    def next(self, depth: int) -> bytes:
        if self._queue:
            return self._queue.popleft()
        return self._roots.empty_root(depth)


class IncrementalMerkleTree:
    """A Merkle tree of fixed depth that only stores its frontier."""

    def __init__(self, depth: int = INCREMENTAL_MERKLE_TREE_DEPTH) -> None:
        if depth < 1:
            raise ValueError("tree depth must be at least 1")
        self.depth = depth
        self.left: Optional[bytes] = None
        self.right: Optional[bytes] = None
        # Collapsed left subtrees ordered toward the root.
        self.parents: List[Optional[bytes]] = []

    @property
    def _emptyroots(self) -> EmptyMerkleRoots:
        return EmptyMerkleRoots(self.depth)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IncrementalMerkleTree):
            return NotImplemented
        return (
            self.depth == other.depth
            and self.left == other.left
            and self.right == other.right
            and self.parents == other.parents
        )

    def __repr__(self) -> str:
        return f"IncrementalMerkleTree(depth={self.depth}, size={self.size()})"

    def _copy(self) -> "IncrementalMerkleTree":
        clone = IncrementalMerkleTree(self.depth)
        clone.left = self.left
        clone.right = self.right
        clone.parents = list(self.parents)
        return clone

    def dynamic_memory_usage(self) -> int:
        return 32 + 32 + len(self.parents) * 32

    def size(self) -> int:
        """Number of leaves appended so far."""
        count = (self.left is not None) + (self.right is not None)
        for i, parent in enumerate(self.parents):
            if parent is not None:
                count += 1 << (i + 1)
        return count

    def append(self, obj: bytes) -> None:
        """Append a leaf; raises RuntimeError if the tree is full."""
        obj = _check_hash(obj)
        if self._is_complete(self.depth):
            raise RuntimeError("tree is full")
        if self.left is None:
            self.left = obj
        elif self.right is None:
            self.right = obj
        else:
            combined = combine(self.left, self.right)
            self.left = obj
            self.right = None
            for i in range(self.depth):
                if i < len(self.parents):
                    parent = self.parents[i]
                    if parent is not None:
                        combined = combine(parent, combined)
                        self.parents[i] = None
                    else:
                        self.parents[i] = combined
                        break
                else:
                    self.parents.append(combined)
                    break

    def _is_complete(self, depth: Optional[int] = None) -> bool:
        if depth is None:
            depth = self.depth
        if self.left is None or self.right is None:
            return False
        if len(self.parents) != depth - 1:
            return False
        return all(parent is not None for parent in self.parents)

    def _next_depth(self, skip: int) -> int:
        if self.left is None:
            if skip:
                skip -= 1
            else:
                return 0
        if self.right is None:
            if skip:
                skip -= 1
            else:
                return 0
        d = 1
        for parent in self.parents:
            if parent is None:
                if skip:
                    skip -= 1
                else:
                    return d
            d += 1
        return d + skip

    def root(self) -> bytes:
        """Root of the full-depth tree with empty leaves filled in."""
        return self._root(self.depth)

    def _root(self, depth: int, filler_hashes: Iterable[bytes] = ()) -> bytes:
        filler = _PathFiller(self._emptyroots, filler_hashes)
        combine_left = self.left if self.left is not None else filler.next(0)
        combine_right = self.right if self.right is not None else filler.next(0)
        node = combine(combine_left, combine_right)
        d = 1
        for parent in self.parents:
            if parent is not None:
                node = combine(parent, node)
            else:
                node = combine(node, filler.next(d))
            d += 1
        while d < depth:
            node = combine(node, filler.next(d))
            d += 1
        return node

    def _path(self, filler_hashes: Iterable[bytes] = ()) -> MerklePath:
        if self.left is None:
            raise ValueError("can't create an authentication path for the beginning of the tree")
        filler = _PathFiller(self._emptyroots, filler_hashes)
        path: List[bytes] = []
        index: List[bool] = []
        if self.right is not None:
            index.append(True)
            path.append(self.left)
        else:
            index.append(False)
            path.append(filler.next(0))
        d = 1
        for parent in self.parents:
            if parent is not None:
                index.append(True)
                path.append(parent)
            else:
                index.append(False)
                path.append(filler.next(d))
            d += 1
        while d < self.depth:
            index.append(False)
            path.append(filler.next(d))
            d += 1
        bits = [bytes_to_bits(node) for node in path]
        return MerklePath(reversed(bits), reversed(index))

    def last(self) -> bytes:
        """The most recently appended leaf."""
        if self.right is not None:
            return self.right
        if self.left is not None:
            return self.left
        raise ValueError("tree has no cursor")

    def witness(self) -> "IncrementalWitness":
        """A witness for the most recently appended leaf."""
        return IncrementalWitness(self._copy())

    def empty_root(self) -> bytes:
        return self._emptyroots.empty_root(self.depth)

    def _wfcheck(self) -> None:
        if len(self.parents) >= self.depth:
            raise SerializationError("tree has too many parents")
        if self.parents and self.parents[-1] is None:
            raise SerializationError("tree has non-canonical representation of parent")
        if self.left is None and self.right is not None:
            raise SerializationError("tree has non-canonical representation; right should not exist")
        if self.left is None and self.parents:
            raise SerializationError("tree has non-canonical representation; parents should not be unempty")

    def serialize(self, stream: BinaryIO) -> None:
        _OPT_HASH.write(stream, self.left)
        _OPT_HASH.write(stream, self.right)
        _PARENTS.write(stream, self.parents)

    @classmethod
    def deserialize(cls, stream: BinaryIO, depth: int = INCREMENTAL_MERKLE_TREE_DEPTH) -> "IncrementalMerkleTree":
        tree = cls(depth)
        tree.left = _OPT_HASH.read(stream)
        tree.right = _OPT_HASH.read(stream)
        tree.parents = _PARENTS.read(stream)
        tree._wfcheck()
        return tree


class IncrementalWitness:
    """Tracks the authentication path of one leaf as the tree grows."""

    def __init__(
        self,
        tree: IncrementalMerkleTree,
        filled: Iterable[bytes] = (),
        cursor: Optional[IncrementalMerkleTree] = None,
    ) -> None:
        self.tree = tree
        self.filled: List[bytes] = list(filled)
        self.cursor = cursor
        self.cursor_depth = 0

    @property
    def depth(self) -> int:
        return self.tree.depth

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IncrementalWitness):
            return NotImplemented
        return (
            self.tree == other.tree
            and self.filled == other.filled
            and self.cursor == other.cursor
            and self.cursor_depth == other.cursor_depth
        )

    def _partial_path(self) -> deque:
        uncles = deque(self.filled)
        if self.cursor is not None:
            uncles.append(self.cursor._root(self.cursor_depth))
        return uncles

    def path(self) -> MerklePath:
        return self.tree._path(self._partial_path())

    def element(self) -> bytes:
        """The leaf being witnessed."""
        return self.tree.last()

    def root(self) -> bytes:
        return self.tree._root(self.depth, self._partial_path())

    def append(self, obj: bytes) -> None:
        """Record a leaf appended to the tree after the witnessed one."""
        obj = _check_hash(obj)
        if self.cursor is not None:
            self.cursor.append(obj)
            if self.cursor._is_complete(self.cursor_depth):
                self.filled.append(self.cursor._root(self.cursor_depth))
                self.cursor = None
        else:
            self.cursor_depth = self.tree._next_depth(len(self.filled))
            if self.cursor_depth >= self.depth:
                raise RuntimeError("tree is full")
            if self.cursor_depth == 0:
                self.filled.append(obj)
            else:
                self.cursor = IncrementalMerkleTree(self.depth)
                self.cursor.append(obj)

    def serialize(self, stream: BinaryIO) -> None:
        self.tree.serialize(stream)
        _HASHES.write(stream, self.filled)
        OptionalOf(Nested(IncrementalMerkleTree, depth=self.depth)).write(stream, self.cursor)

    @classmethod
    def deserialize(cls, stream: BinaryIO, depth: int = INCREMENTAL_MERKLE_TREE_DEPTH) -> "IncrementalWitness":
        tree = IncrementalMerkleTree.deserialize(stream, depth)
        filled = _HASHES.read(stream)
        cursor = OptionalOf(Nested(IncrementalMerkleTree, depth=depth)).read(stream)
        witness = cls(tree, filled, cursor)
        witness.cursor_depth = tree._next_depth(len(filled))
        return witness