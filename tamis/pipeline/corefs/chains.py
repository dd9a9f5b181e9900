from __future__ import annotations
from typing import Dict, List
from dataclasses import dataclass
from tamis.pipeline.core import Document
from tamis.pipeline.corefs.clusters import ClusterStore
from tamis.pipeline.corefs.mentions import Mention


@dataclass(frozen=True)
class Chain:
    """A coreference chain: the frozen form of a cluster, after all
    sieves ran."""

    #: id of the chain, equal to the id of its first mention
    id: int
    #: members, in document order
    mentions: List[Mention]

    def representative(self) -> Mention:
        return self.mentions[0]

    def __len__(self) -> int:
        return len(self.mentions)

    def __repr__(self) -> str:
        return f"Chain({self.id}, {[m.surface() for m in self.mentions]})"


class ChainBuilder:
    """Convert the final clusters of a document into chains, and annotate
    mentions and tokens with their chain id."""

    def __call__(self, document: Document, clusters: ClusterStore) -> Dict[int, Chain]:
        """
        :return: a dict mapping each chain id to its chain.  Every
            mention is part of a chain, singleton chains included.
        """
        chains = {
            chain_id: Chain(chain_id, sorted(members, key=Mention.doc_order))
            for chain_id, members in clusters.clusters().items()
        }

        document.clear_corefs_()
        for chain in chains.values():
            for mention in chain.mentions:
                mention.cluster_id = chain.id

        # when mentions are nested, a token is annotated with the chain
        # of its innermost mention: larger mentions are written first
        mentions = [mention for chain in chains.values() for mention in chain.mentions]
        mentions.sort(key=lambda m: (-(m.end_idx - m.start_idx), m.id))
        for mention in mentions:
            sentence = document.sentences[mention.sent_idx]
            for token in sentence.tokens[mention.start_idx : mention.end_idx]:
                token.coref_cluster_id = mention.cluster_id

        return chains
