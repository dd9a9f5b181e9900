from __future__ import annotations
from typing import Dict, FrozenSet, List, Optional, Set, Tuple
from dataclasses import dataclass, field
import sys
from nltk import Tree
from tamis.attributes import (
    Animacy,
    EntityType,
    Gender,
    MentionType,
    Number,
    Person,
    entity_type_from_tag,
)
from tamis.pipeline.core import Document, Sentence
from tamis.resources.pronouns import all_pronouns, relative_pronouns
from tamis.trees import (
    PRONOUN_TAGS,
    PROPER_NOUN_TAGS,
    TreePosition,
    base_label,
    head_position,
    node_spans,
    parse_tree,
    preterminal_positions,
)

#: verbs after which a subject *it* can be pleonastic (*it seems
#: that...*, *it is likely that...*)
PLEONASTIC_VERBS = {
    "is",
    "was",
    "'s",
    "be",
    "been",
    "being",
    "seems",
    "seemed",
    "seem",
    "appears",
    "appeared",
    "appear",
}
WEATHER_VERBS = {
    "rain",
    "rains",
    "rained",
    "raining",
    "snow",
    "snows",
    "snowed",
    "snowing",
}


@dataclass(eq=False)
class Mention:
    """A span of tokens, in a single sentence, referring to an entity.

    A mention is created by :class:`MentionExtractor`, then enriched
    by :class:`.FeatureExtractor`.  Afterwards, only its ``cluster_id``
    changes.
    """

    #: dense id, starting at 1, in document order
    id: int
    sent_idx: int
    #: start token index in the sentence
    start_idx: int
    #: end token index in the sentence (exclusive)
    end_idx: int
    tokens: List[str]
    mention_type: MentionType
    #: position of the parse node this mention was extracted from, if
    #: the mention comes from the parse
    tree_position: Optional[TreePosition] = None
    #: ids of the mentions whose span strictly contains this mention
    containers: Set[int] = field(default_factory=set)

    head_idx: int = -1
    head_word: str = ""
    entity_type: EntityType = EntityType.NONE
    gender: Gender = Gender.UNKNOWN
    number: Number = Number.UNKNOWN
    animacy: Animacy = Animacy.UNKNOWN
    person: Person = Person.UNKNOWN
    speaker: Optional[str] = None

    #: lowercased text, without leading determiner nor trailing
    #: possessive marker
    normalized: str = ""
    #: normalized text, cut after the head word
    relaxed: str = ""
    #: nouns, adjectives and numbers before the head word
    modifiers: FrozenSet[str] = frozenset()
    #: lowercased non-stop words
    content_words: FrozenSet[str] = frozenset()
    numbers: FrozenSet[str] = frozenset()
    is_reflexive: bool = False
    is_relative: bool = False
    is_possessive: bool = False
    is_indefinite: bool = False

    #: id of the chain of this mention, set after resolution
    cluster_id: Optional[int] = None

    def surface(self) -> str:
        return " ".join(self.tokens)

    def is_pronoun(self) -> bool:
        return self.mention_type == MentionType.PRONOMINAL

    def doc_order(self) -> Tuple[int, int, int]:
        return (self.sent_idx, self.start_idx, self.end_idx)

    def contains(self, other: Mention) -> bool:
        return self.id in other.containers

    def __repr__(self) -> str:
        return f"<{self.id}: '{self.surface()}' ({self.sent_idx}, {self.start_idx}:{self.end_idx})>"


#: a mention before id assignment: span, type and parse position
_Candidate = Tuple[Tuple[int, int], MentionType, Optional[TreePosition]]


class MentionExtractor:
    """Extract candidate mentions from the sentences of a document.

    Mentions are pronouns, proper noun spans (extended to the named
    entity covering them), and noun phrases of the parse.  A sentence
    without a usable parse only yields pronouns and proper noun spans.
    """

    def __init__(self, lang: str = "eng", warn: bool = True):
        """
        :param lang: ISO 639-3 language code
        :param warn: if ``True``, print a warning on stderr when a
            sentence parse can't be used
        """
        self.pronouns = all_pronouns(lang)
        self.relative_pronouns = relative_pronouns[lang]
        self.warn = warn

    def __call__(
        self, document: Document, trees: Optional[List[Optional[Tree]]] = None
    ) -> List[Mention]:
        """Extract all mentions of ``document``, in document order.

        :param trees: the usable parse of each sentence, as returned
            by :meth:`usable_parses`.  Computed when not given.

        :return: a list of mentions, with ids from 1 to the number of
            mentions
        """
        if trees is None:
            trees = self.usable_parses(document)
        assert len(trees) == len(document.sentences)

        raw_mentions = []
        for sent_idx, (sentence, tree) in enumerate(zip(document.sentences, trees)):
            for span, mention_type, position in self._sentence_candidates(
                sentence, tree
            ):
                raw_mentions.append((sent_idx, span, mention_type, position))

        raw_mentions.sort(key=lambda m: (m[0], m[1][0], m[1][1]))

        mentions = []
        for mention_id, (sent_idx, (start, end), mention_type, position) in enumerate(
            raw_mentions, start=1
        ):
            words = document.sentences[sent_idx].words()[start:end]
            mentions.append(
                Mention(mention_id, sent_idx, start, end, words, mention_type, position)
            )

        MentionExtractor._set_containers_(mentions)
        return mentions

    def usable_parses(self, document: Document) -> List[Optional[Tree]]:
        return [
            self.usable_parse(sentence, sent_idx)
            for sent_idx, sentence in enumerate(document.sentences)
        ]

    def usable_parse(self, sentence: Sentence, sent_idx: int) -> Optional[Tree]:
        """Return the parse of ``sentence`` if it can be used for mention
        extraction, ``None`` otherwise.
        """
        if sentence.parse is None:
            if self.warn:
                print(
                    f"[warning] sentence {sent_idx} has no parse: only pronouns and named entities will be extracted.",
                    file=sys.stderr,
                )
            return None
        try:
            tree = parse_tree(sentence.parse)
        except ValueError:
            tree = None
        if tree is None or tree.leaves() != sentence.words():
            if self.warn:
                print(
                    f"[warning] sentence {sent_idx} has a malformed parse: only pronouns and named entities will be extracted.",
                    file=sys.stderr,
                )
            return None
        return tree

    def _sentence_candidates(
        self, sentence: Sentence, tree: Optional[Tree]
    ) -> List[_Candidate]:
        # span => (type, position).  A python dict keeps insertion
        # order, which makes extraction deterministic.
        candidates: Dict[Tuple[int, int], Tuple[MentionType, Optional[TreePosition]]] = {}

        def add(span: Tuple[int, int], mention_type: MentionType, position):
            if not span in candidates:
                candidates[span] = (mention_type, position)
                return
            old_type, old_position = candidates[span]
            # keep the shallowest node covering the span
            if not position is None and (
                old_position is None or len(position) < len(old_position)
            ):
                candidates[span] = (old_type, position)

        preterminals = preterminal_positions(tree) if not tree is None else None

        for span, position in self._pronoun_spans(sentence, tree, preterminals):
            add(span, MentionType.PRONOMINAL, position)

        for span in self._proper_spans(sentence):
            add(span, MentionType.PROPER, None)

        if not tree is None:
            for span, position in self._np_spans(sentence, tree):
                add(span, MentionType.NOMINAL, position)

        return [(span, t, p) for span, (t, p) in candidates.items()]

    def _pronoun_spans(
        self,
        sentence: Sentence,
        tree: Optional[Tree],
        preterminals: Optional[List[TreePosition]],
    ) -> List[Tuple[Tuple[int, int], Optional[TreePosition]]]:
        spans = []
        for token_i, token in enumerate(sentence.tokens):
            word = token.text.lower()
            if not word in self.pronouns:
                continue
            if not token.pos is None and not token.pos in PRONOUN_TAGS:
                continue
            position = None
            if not tree is None:
                assert not preterminals is None
                position = preterminals[token_i]
                if word in self.relative_pronouns and not (
                    len(position) > 0 and base_label(tree[position[:-1]]) == "WHNP"
                ):
                    continue
                if word == "it" and MentionExtractor._is_pleonastic(tree, position):
                    continue
                # use the NP node of the pronoun, if any
                while (
                    len(position) > 0
                    and base_label(tree[position[:-1]]) == "NP"
                    and len(tree[position[:-1]]) == 1
                ):
                    position = position[:-1]
            elif word in self.relative_pronouns:
                # relative pronouns can't be told apart without a parse
                continue
            spans.append(((token_i, token_i + 1), position))
        return spans

    @staticmethod
    def _is_pleonastic(tree: Tree, position: TreePosition) -> bool:
        """Check if the pronoun *it* at ``position`` is pleonastic, as in
        *it is raining* or *it seems that he left*.
        """
        np_position = position[:-1]
        if len(np_position) == 0 or base_label(tree[np_position]) != "NP":
            return False
        clause_position = np_position[:-1]
        clause = tree[clause_position]
        if not base_label(clause) in ("S", "SQ", "SINV"):
            return False
        vps = [
            child
            for child in clause[np_position[-1] + 1 :]
            if isinstance(child, Tree) and base_label(child) == "VP"
        ]
        if len(vps) == 0:
            return False
        vp = vps[0]
        words = [w.lower() for w in vp.leaves()]
        if len(words) > 0 and (
            words[0] in WEATHER_VERBS or (len(words) > 1 and words[1] in WEATHER_VERBS)
        ):
            return True
        if len(words) == 0 or not words[0] in PLEONASTIC_VERBS:
            return False
        for child in vp:
            if not isinstance(child, Tree):
                continue
            label = base_label(child)
            if label in ("SBAR", "S"):
                return True
            if label == "ADJP" and any(
                isinstance(c, Tree) and base_label(c) in ("SBAR", "S") for c in child
            ):
                return True
        return False

    def _proper_spans(self, sentence: Sentence) -> List[Tuple[int, int]]:
        """Maximal runs of proper nouns, extended to the boundaries of
        the named entity covering them, plus named entities that do not
        contain any proper noun.
        """
        tokens = sentence.tokens
        types = [entity_type_from_tag(token.ner) for token in tokens]

        def is_entity(i: int) -> bool:
            return not types[i] in (EntityType.NONE, EntityType.NUMERIC)

        spans = []

        # proper nouns runs
        i = 0
        while i < len(tokens):
            if not tokens[i].pos in PROPER_NOUN_TAGS:
                i += 1
                continue
            start = i
            while i < len(tokens) and tokens[i].pos in PROPER_NOUN_TAGS:
                i += 1
            end = i
            run_types = {types[j] for j in range(start, end)} - {EntityType.NONE}
            if EntityType.NUMERIC in run_types:
                continue
            if len(run_types) == 1:
                run_type = run_types.pop()
                while start > 0 and types[start - 1] == run_type:
                    start -= 1
                while end < len(tokens) and types[end] == run_type:
                    end += 1
                i = max(i, end)
            spans.append((start, end))

        # named entities without proper nouns
        i = 0
        while i < len(tokens):
            if not is_entity(i):
                i += 1
                continue
            start = i
            while i < len(tokens) and types[i] == types[start]:
                i += 1
            if not any(tokens[j].pos in PROPER_NOUN_TAGS for j in range(start, i)):
                spans.append((start, i))

        return spans

    def _np_spans(
        self, sentence: Sentence, tree: Tree
    ) -> List[Tuple[Tuple[int, int], TreePosition]]:
        spans = node_spans(tree)
        np_spans = []
        # treepositions are in preorder: an NP is always seen before
        # the NPs it contains
        for position in tree.treepositions():
            node = tree[position]
            if not isinstance(node, Tree) or base_label(node) != "NP":
                continue
            span = spans[position]
            if span[0] == span[1]:
                continue
            # pronouns are extracted (or filtered out) on their own
            if (
                span[1] - span[0] == 1
                and sentence.tokens[span[0]].text.lower() in self.pronouns
            ):
                continue
            head = sentence.tokens[spans[head_position(tree, position)][0]]
            # numeric mentions (*200*, *last year*) and existential
            # *there* are not referring mentions
            if head.pos in ("CD", "EX") or entity_type_from_tag(
                head.ner
            ) == EntityType.NUMERIC:
                continue
            np_spans.append((span, position))
        return np_spans

    @staticmethod
    def _set_containers_(mentions: List[Mention]):
        by_sentence: Dict[int, List[Mention]] = {}
        for mention in mentions:
            by_sentence.setdefault(mention.sent_idx, []).append(mention)
        for sent_mentions in by_sentence.values():
            for mention in sent_mentions:
                for other in sent_mentions:
                    if other is mention:
                        continue
                    if (
                        other.start_idx <= mention.start_idx
                        and mention.end_idx <= other.end_idx
                        and (other.start_idx, other.end_idx)
                        != (mention.start_idx, mention.end_idx)
                    ):
                        mention.containers.add(other.id)
