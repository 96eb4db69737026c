"""Node values for the browsed namespace.

Two kinds of node live here:

- RemoteNode / NodeStat: a fresh snapshot of one znode as the access
  layer returned it. Never cached.
- TreeNode: one entry of the locally materialized tree. Immutable; the
  tree engine replaces nodes instead of mutating them.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..._common import ROOT, node_name


class ChildState(Enum):
    """What we know about a tree node's children.

    Newly discovered nodes start UNKNOWN and are treated as possibly
    having children until their own expansion proves otherwise.
    """
    UNKNOWN = 0    # Never listed; assume children may exist
    PRESENT = 1    # Last successful list returned at least one child
    ABSENT = 2     # Last successful list returned nothing


class NodeState(Enum):
    """Per-node expansion state machine."""
    COLLAPSED = "collapsed"
    LOADING = "loading"
    EXPANDED = "expanded"


@dataclass(frozen=True)
class NodeStat:
    """Stat record of a remote node.

    Times are milliseconds since the epoch, as the service reports them.
    """
    ctime: int = 0
    mtime: int = 0
    version: int = 0
    cversion: int = 0
    aversion: int = 0
    ephemeral_owner: int = 0
    data_length: int = 0
    num_children: int = 0

    @property
    def is_ephemeral(self) -> bool:
        """Ephemeral nodes carry the id of their owning session."""
        return self.ephemeral_owner != 0

    @classmethod
    def from_dict(cls, payload: Optional[Dict[str, Any]]) -> "NodeStat":
        """Build from the proxy's camelCase JSON."""
        payload = payload or {}
        return cls(
            ctime=int(payload.get('ctime', 0) or 0),
            mtime=int(payload.get('mtime', 0) or 0),
            version=int(payload.get('version', 0) or 0),
            cversion=int(payload.get('cversion', 0) or 0),
            aversion=int(payload.get('aversion', 0) or 0),
            ephemeral_owner=int(payload.get('ephemeralOwner', 0) or 0),
            data_length=int(payload.get('dataLength', 0) or 0),
            num_children=int(payload.get('numChildren', 0) or 0),
        )

    @classmethod
    def from_znode_stat(cls, stat: Any) -> "NodeStat":
        """Build from a kazoo ``ZnodeStat`` (or anything with its attributes)."""
        return cls(
            ctime=stat.ctime,
            mtime=stat.mtime,
            version=stat.version,
            cversion=stat.cversion,
            aversion=stat.aversion,
            ephemeral_owner=stat.ephemeralOwner,
            data_length=stat.dataLength,
            num_children=stat.numChildren,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            'ctime': self.ctime,
            'mtime': self.mtime,
            'version': self.version,
            'cversion': self.cversion,
            'aversion': self.aversion,
            'ephemeralOwner': self.ephemeral_owner,
            'dataLength': self.data_length,
            'numChildren': self.num_children,
        }


@dataclass(frozen=True)
class RemoteNode:
    """Full snapshot of one remote node: payload, child names and stat."""
    path: str
    data: str = ""
    children: List[str] = field(default_factory=list)
    stat: NodeStat = field(default_factory=NodeStat)

    @property
    def name(self) -> str:
        return node_name(self.path)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any], path: Optional[str] = None) -> "RemoteNode":
        return cls(
            path=payload.get('path') or path or ROOT,
            data=payload.get('data') or "",
            children=list(payload.get('children') or []),
            stat=NodeStat.from_dict(payload.get('stat')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'data': self.data,
            'children': list(self.children),
            'stat': self.stat.to_dict(),
        }


@dataclass(frozen=True)
class TreeNode:
    """One entry of the lazily expanded tree.

    ``children`` holds child paths, in the order the remote listed them;
    the owning TreeSnapshot resolves them to nodes.
    """
    path: str
    children: Tuple[str, ...] = ()
    expanded: bool = False
    has_children: ChildState = ChildState.UNKNOWN
    loaded: bool = False

    @property
    def name(self) -> str:
        return node_name(self.path)

    @property
    def display_name(self) -> str:
        return "root" if self.path == ROOT else self.name

    @property
    def is_root(self) -> bool:
        return self.path == ROOT

    @property
    def may_have_children(self) -> bool:
        """Whether a front end should offer an expand affordance."""
        return self.has_children is not ChildState.ABSENT

    def with_children(self, child_paths: Tuple[str, ...]) -> "TreeNode":
        """Loaded, expanded copy holding ``child_paths``."""
        return replace(
            self,
            children=tuple(child_paths),
            expanded=True,
            loaded=True,
            has_children=ChildState.PRESENT if child_paths else ChildState.ABSENT,
        )

    def toggled(self, expanded: bool) -> "TreeNode":
        return replace(self, expanded=expanded)

    def __repr__(self) -> str:
        flag = "+" if self.expanded else "-"
        return f"TreeNode({self.path!r} {flag} {self.has_children.name})"
