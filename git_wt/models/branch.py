"""Branch provenance model"""
from enum import Enum
from dataclasses import dataclass
from typing import Optional


class ProvenanceKind(Enum):
    """Where a requested branch comes from at creation time."""
    LOCAL = "local"
    REMOTE = "remote"
    NEW = "new"


@dataclass(frozen=True)
class BranchProvenance:
    """Classification of a requested branch.

    Exactly one kind applies. `is_stale` is only meaningful for LOCAL and
    `remote_name` only for REMOTE; use the constructors below instead of
    building instances directly.
    """
    kind: ProvenanceKind
    is_stale: bool = False
    remote_name: Optional[str] = None

    def __post_init__(self):
        if self.kind is ProvenanceKind.REMOTE and not self.remote_name:
            raise ValueError("remote provenance requires a remote name")
        if self.kind is not ProvenanceKind.REMOTE and self.remote_name is not None:
            raise ValueError(f"{self.kind.value} provenance cannot carry a remote name")
        if self.kind is not ProvenanceKind.LOCAL and self.is_stale:
            raise ValueError("only local branches can be stale")

    @classmethod
    def local(cls, is_stale: bool = False) -> "BranchProvenance":
        return cls(ProvenanceKind.LOCAL, is_stale=is_stale)

    @classmethod
    def remote(cls, remote_name: str) -> "BranchProvenance":
        return cls(ProvenanceKind.REMOTE, remote_name=remote_name)

    @classmethod
    def new(cls) -> "BranchProvenance":
        return cls(ProvenanceKind.NEW)

    @property
    def is_local(self) -> bool:
        return self.kind is ProvenanceKind.LOCAL

    @property
    def is_remote(self) -> bool:
        return self.kind is ProvenanceKind.REMOTE

    @property
    def is_new(self) -> bool:
        return self.kind is ProvenanceKind.NEW
