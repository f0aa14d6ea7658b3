"""
Directory-tree projection of the song index.

Song paths are split on "/" into directory nodes and song leaves. Nodes live
in one arena list whose index is the node's hierarchy id, assigned by a
pre-order walk of the finished tree: root is 0 and every subtree occupies a
contiguous id range. Selection state is kept apart from the nodes in
TreeSelection.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

ROOT_NAME = "/"


@dataclass
class TreeNode:
    """One directory or song in the arena. ``parent`` and ``children`` are ids."""

    id: int
    name: str
    path: str  # full virtual path, "" for root
    parent: Optional[int]
    children: List[int] = field(default_factory=list)
    song_path: Optional[str] = None

    @property
    def is_leaf(self) -> bool:
        return self.song_path is not None


def split_path(path: str) -> Tuple[str, str]:
    """Split at the last "/" into (directory, name); top-level names get ""."""
    directory, slash, name = path.rpartition("/")
    if not slash:
        return "", path
    return directory, name


class _Draft:
    __slots__ = ("name", "path", "song_path", "children")

    def __init__(self, name: str, path: str, song_path: Optional[str] = None):
        self.name = name
        self.path = path
        self.song_path = song_path
        self.children: List["_Draft"] = []


class DirectoryTree:
    """Immutable arena of tree nodes indexed by hierarchy id."""

    def __init__(self, nodes: List[TreeNode]):
        self.nodes = nodes

    @property
    def root(self) -> TreeNode:
        return self.nodes[0]

    def __len__(self) -> int:
        return len(self.nodes)

    def node(self, node_id: int) -> TreeNode:
        return self.nodes[node_id]

    def is_leaf(self, node_id: int) -> bool:
        return self.nodes[node_id].is_leaf

    def ancestors(self, node_id: int) -> List[int]:
        """Ids from the node's parent up to the root."""
        result = []
        parent = self.nodes[node_id].parent
        while parent is not None:
            result.append(parent)
            parent = self.nodes[parent].parent
        return result

    def subtree_end(self, node_id: int) -> int:
        """One past the last id in the node's subtree."""
        node = self.nodes[node_id]
        while node.children:
            node = self.nodes[node.children[-1]]
        return node.id + 1

    def song_paths_under(self, node_id: int) -> List[str]:
        """Song paths of every leaf in the subtree, in hierarchy order."""
        return [
            node.song_path
            for node in self.nodes[node_id:self.subtree_end(node_id)]
            if node.song_path is not None
        ]


def build_directory_tree(song_paths: Iterable[str]) -> DirectoryTree:
    """Build the directory tree for ``song_paths``.

    Paths are attached in sorted order, so children appear in the order their
    first song path sorts. Ids are assigned from scratch on every build.
    """
    root = _Draft(ROOT_NAME, "")
    directories: Dict[str, _Draft] = {"": root}

    def find_directory(path: str) -> _Draft:
        existing = directories.get(path)
        if existing is not None:
            return existing
        parent_path, name = split_path(path)
        parent = find_directory(parent_path)
        directory = _Draft(name, path)
        parent.children.append(directory)
        directories[path] = directory
        return directory

    for song_path in sorted(set(song_paths)):
        directory_path, file_name = split_path(song_path)
        find_directory(directory_path).children.append(
            _Draft(file_name, song_path, song_path=song_path)
        )

    nodes: List[TreeNode] = []
    # iterative pre-order walk; (draft, parent id)
    stack: List[Tuple[_Draft, Optional[int]]] = [(root, None)]
    while stack:
        draft, parent = stack.pop()
        node = TreeNode(
            id=len(nodes),
            name=draft.name,
            path=draft.path,
            parent=parent,
            song_path=draft.song_path,
        )
        nodes.append(node)
        if parent is not None:
            nodes[parent].children.append(node.id)
        for child in reversed(draft.children):
            stack.append((child, node.id))

    return DirectoryTree(nodes)


class TreeSelection:
    """Expansion and multi-selection state for a DirectoryTree.

    The root starts expanded. ``pivot`` anchors range selection and
    ``current`` is the keyboard cursor.
    """

    def __init__(self, tree: DirectoryTree):
        self.tree = tree
        self.expanded: Set[int] = {0} if len(tree) else set()
        self.members: Set[int] = set()
        self.pivot: Optional[int] = None
        self.current: Optional[int] = None

    def expand(self, node_id: int) -> None:
        """Expand a node and every ancestor so it becomes visible."""
        self.expanded.add(node_id)
        self.expanded.update(self.tree.ancestors(node_id))

    def collapse(self, node_id: int) -> None:
        self.expanded.discard(node_id)

    def is_visible(self, node_id: int) -> bool:
        return all(ancestor in self.expanded for ancestor in self.tree.ancestors(node_id))

    def visible_ids(self) -> List[int]:
        """Ids of nodes whose ancestors are all expanded, in hierarchy order."""
        if not len(self.tree):
            return []
        result = []
        node_id = 0
        end = len(self.tree)
        while node_id < end:
            result.append(node_id)
            if node_id in self.expanded or self.tree.is_leaf(node_id):
                node_id += 1
            else:
                node_id = self.tree.subtree_end(node_id)
        return result

    def select(self, node_id: int) -> None:
        """Make ``node_id`` the only selected node, the pivot and the cursor."""
        self.members = {node_id}
        self.pivot = node_id
        self.current = node_id

    def toggle(self, node_id: int) -> None:
        if node_id in self.members:
            self.members.discard(node_id)
        else:
            self.members.add(node_id)
        self.pivot = node_id
        self.current = node_id

    def clear(self) -> None:
        self.members.clear()

    def select_range(self, to_id: int) -> None:
        """Add every visible node between the pivot and ``to_id`` inclusive.

        Without a pivot this behaves like ``select``.
        """
        if self.pivot is None:
            self.select(to_id)
            return
        low, high = min(self.pivot, to_id), max(self.pivot, to_id)
        self.members.update(i for i in self.visible_ids() if low <= i <= high)
        self.current = to_id

    def next_visible(self, node_id: Optional[int] = None) -> Optional[int]:
        """Visible node after ``node_id`` (default: cursor), clamped at the end."""
        return self._step(node_id, 1)

    def previous_visible(self, node_id: Optional[int] = None) -> Optional[int]:
        """Visible node before ``node_id`` (default: cursor), clamped at the start."""
        return self._step(node_id, -1)

    def _step(self, node_id: Optional[int], offset: int) -> Optional[int]:
        if node_id is None:
            node_id = self.current
        if node_id is None:
            return None
        visible = self.visible_ids()
        if not visible:
            return None
        # first visible node at or after node_id; hidden nodes step from there
        position = next((i for i, v in enumerate(visible) if v >= node_id), len(visible))
        if position < len(visible) and visible[position] == node_id:
            position += offset
        elif offset < 0:
            position -= 1
        return visible[max(0, min(position, len(visible) - 1))]

    def selected_song_paths(self) -> List[str]:
        """Songs under every selected node, deduplicated, in hierarchy order."""
        leaves: Set[int] = set()
        for member in self.members:
            end = self.tree.subtree_end(member)
            leaves.update(i for i in range(member, end) if self.tree.is_leaf(i))
        return [self.tree.nodes[i].song_path for i in sorted(leaves)]
