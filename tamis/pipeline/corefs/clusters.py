from __future__ import annotations
from typing import Dict, List
from dataclasses import dataclass
from tamis.attributes import (
    Animacy,
    Gender,
    Number,
    attributes_are_compatible,
    merged_attribute,
)
from tamis.pipeline.corefs.mentions import Mention


@dataclass(frozen=True)
class ClusterAttributes:
    """Aggregated attributes of a cluster"""

    gender: Gender = Gender.UNKNOWN
    number: Number = Number.UNKNOWN
    animacy: Animacy = Animacy.UNKNOWN

    @staticmethod
    def of_mention(mention: Mention) -> ClusterAttributes:
        return ClusterAttributes(mention.gender, mention.number, mention.animacy)

    def merged(self, other: ClusterAttributes) -> ClusterAttributes:
        """Merge two sets of attributes.  Conflicting values are
        downgraded to unknown."""
        return ClusterAttributes(
            merged_attribute(self.gender, other.gender),  # type: ignore
            merged_attribute(self.number, other.number),  # type: ignore
            merged_attribute(self.animacy, other.animacy),  # type: ignore
        )

    def agrees_with(self, other: ClusterAttributes) -> bool:
        return (
            attributes_are_compatible(self.gender, other.gender)
            and attributes_are_compatible(self.number, other.number)
            and attributes_are_compatible(self.animacy, other.animacy)
        )


class ClusterStore:
    """A union-find structure over the mentions of a document.

    Every mention starts in its own singleton cluster.  Clusters only
    grow, and the representative of a cluster is always its mention
    with the smallest id, which is its first mention in document
    order.
    """

    def __init__(self, mentions: List[Mention]):
        """
        :param mentions: mentions of a document, with dense ids from 1
            to ``len(mentions)``
        """
        self.mentions = [None] + list(mentions)
        for i, mention in enumerate(mentions, start=1):
            if mention.id != i:
                raise ValueError(
                    f"[error] mention ids must be dense and start at 1 (got {mention.id} at position {i})"
                )
        # index 0 is unused
        self.parent = list(range(len(mentions) + 1))
        self._members: Dict[int, List[int]] = {m.id: [m.id] for m in mentions}
        self._attributes: Dict[int, ClusterAttributes] = {
            m.id: ClusterAttributes.of_mention(m) for m in mentions
        }

    def __len__(self) -> int:
        return len(self.parent) - 1

    def _find_id(self, mention_id: int) -> int:
        root = mention_id
        while self.parent[root] != root:
            root = self.parent[root]
        # path compression
        while self.parent[mention_id] != root:
            self.parent[mention_id], mention_id = root, self.parent[mention_id]
        return root

    def find(self, mention: Mention) -> Mention:
        """Return the representative of the cluster of ``mention``"""
        return self.mentions[self._find_id(mention.id)]  # type: ignore

    def linked(self, mention1: Mention, mention2: Mention) -> bool:
        return self._find_id(mention1.id) == self._find_id(mention2.id)

    def merge(self, mention1: Mention, mention2: Mention) -> Mention:
        """Merge the clusters of two mentions.  Merging two mentions
        already in the same cluster does nothing.

        :return: the representative of the merged cluster
        """
        root1 = self._find_id(mention1.id)
        root2 = self._find_id(mention2.id)
        if root1 == root2:
            return self.mentions[root1]  # type: ignore
        new_root, old_root = min(root1, root2), max(root1, root2)
        self.parent[old_root] = new_root
        self._members[new_root].extend(self._members.pop(old_root))
        self._attributes[new_root] = self._attributes[new_root].merged(
            self._attributes.pop(old_root)
        )
        return self.mentions[new_root]  # type: ignore

    def members(self, mention: Mention) -> List[Mention]:
        """Mentions of the cluster of ``mention``, in document order"""
        root = self._find_id(mention.id)
        return [self.mentions[i] for i in sorted(self._members[root])]  # type: ignore

    def attributes(self, mention: Mention) -> ClusterAttributes:
        return self._attributes[self._find_id(mention.id)]

    def attributes_agree(self, mention1: Mention, mention2: Mention) -> bool:
        """Check that the aggregated attributes of the clusters of two
        mentions are compatible"""
        return self.attributes(mention1).agrees_with(self.attributes(mention2))

    def is_first_of_cluster(self, mention: Mention) -> bool:
        return self._find_id(mention.id) == mention.id

    def clusters(self) -> Dict[int, List[Mention]]:
        """All clusters, by representative id.  Members are in document
        order."""
        return {
            root: [self.mentions[i] for i in sorted(member_ids)]  # type: ignore
            for root, member_ids in sorted(self._members.items())
        }
