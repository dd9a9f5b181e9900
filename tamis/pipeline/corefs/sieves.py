"""The ordered matching rules ("sieves") of the resolver.

Sieves run one after the other over the whole document, from the most
precise to the least precise.  Each sieve looks at every mention in
document order, and merges it with at most one antecedent: the first
compatible candidate in the sieve's search order.
"""
from __future__ import annotations
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Type
from dataclasses import dataclass
from more_itertools import flatten
from nltk import Tree
from tamis.attributes import (
    Animacy,
    EntityType,
    MentionType,
    Person,
    attributes_are_compatible,
    entity_type_from_tag,
)
from tamis.pipeline.core import Document
from tamis.pipeline.corefs.clusters import ClusterStore
from tamis.pipeline.corefs.mentions import Mention
from tamis.resources.dictionaries import CorefDictionaries
from tamis.trees import (
    PROPER_NOUN_TAGS,
    TreePosition,
    base_label,
    clause_position,
    is_argument_of,
)

COPULAS = {
    "is",
    "are",
    "was",
    "were",
    "be",
    "been",
    "being",
    "am",
    "'s",
    "'re",
    "'m",
    "become",
    "becomes",
    "became",
}
AUXILIARIES = COPULAS | {
    "has",
    "have",
    "had",
    "'ve",
    "will",
    "would",
    "'ll",
    "'d",
    "can",
    "could",
    "may",
    "might",
    "shall",
    "should",
    "must",
}


@dataclass
class SieveContext:
    """Everything a sieve needs to resolve one document.

    A context is created for each resolved document: it holds all the
    mutable state of a resolution.
    """

    document: Document
    #: mentions of the document, in document order
    mentions: List[Mention]
    #: usable parse of each sentence, if any
    trees: List[Optional[Tree]]
    clusters: ClusterStore
    dictionaries: CorefDictionaries
    #: number of sentences before the pronoun sentence where the
    #: pronoun sieve looks for antecedents
    pronoun_window: int = 3

    def __post_init__(self):
        self.mentions_by_sentence: Dict[int, List[Mention]] = {
            i: [] for i in range(len(self.document.sentences))
        }
        for mention in self.mentions:
            self.mentions_by_sentence[mention.sent_idx].append(mention)

    def cluster_of(self, mention: Mention) -> List[Mention]:
        return self.clusters.members(mention)


def salience_key(mention: Mention):
    """Sort key ranking the mentions of a sentence: shallower parse
    nodes first, then leftmost first.  This approximates a left to
    right, breadth first traversal of the parse tree.
    """
    depth = len(mention.tree_position) if not mention.tree_position is None else 1000
    return (depth, mention.start_idx, mention.end_idx)


def search_order(
    anaphor: Mention, ctx: SieveContext, window: Optional[int] = None
) -> List[Mention]:
    """Candidate antecedents of ``anaphor``, in search order.

    Preceding mentions of the anaphor's sentence come first, then the
    mentions of previous sentences, from the nearest to the farthest
    sentence.  Mentions of a sentence are ranked by salience.

    :param window: if given, only look this number of sentences
        before the anaphor's sentence.
    """
    candidates = sorted(
        [m for m in ctx.mentions_by_sentence[anaphor.sent_idx] if m.id < anaphor.id],
        key=salience_key,
    )
    first_sentence = 0 if window is None else max(0, anaphor.sent_idx - window)
    for sent_idx in range(anaphor.sent_idx - 1, first_sentence - 1, -1):
        candidates += sorted(ctx.mentions_by_sentence[sent_idx], key=salience_key)
    return candidates


def clusters_are_nested(
    mention1: Mention, mention2: Mention, ctx: SieveContext
) -> bool:
    """Check if merging the clusters of two mentions would put a
    mention and a mention containing it in the same cluster
    (i-within-i).
    """
    cluster1 = ctx.cluster_of(mention1)
    cluster2 = ctx.cluster_of(mention2)
    return any(
        m1.contains(m2) or m2.contains(m1) for m1 in cluster1 for m2 in cluster2
    )


class Sieve:
    """A matching rule.

    .. note::

        derived classes must define ``name`` and override
        :meth:`is_coreferent`.  They can override :meth:`considers`
        and :meth:`candidates` to change which anaphors are resolved
        and where antecedents are searched.
    """

    name: str = ""

    def considers(self, anaphor: Mention, ctx: SieveContext) -> bool:
        """Check if the sieve tries to resolve ``anaphor``.  By default,
        only non-pronominal mentions that are the first mention of
        their cluster are resolved.
        """
        return not anaphor.is_pronoun() and ctx.clusters.is_first_of_cluster(anaphor)

    def candidates(self, anaphor: Mention, ctx: SieveContext) -> Iterable[Mention]:
        return search_order(anaphor, ctx)

    def is_coreferent(
        self, anaphor: Mention, antecedent: Mention, ctx: SieveContext
    ) -> bool:
        raise NotImplementedError

    def __call__(self, ctx: SieveContext) -> int:
        """Run the sieve over the whole document

        :return: the number of merges performed
        """
        merges_nb = 0
        for anaphor in ctx.mentions:
            if not self.considers(anaphor, ctx):
                continue
            for antecedent in self.candidates(anaphor, ctx):
                if ctx.clusters.linked(anaphor, antecedent):
                    continue
                if clusters_are_nested(anaphor, antecedent, ctx):
                    continue
                if not ctx.clusters.attributes_agree(anaphor, antecedent):
                    continue
                if self.is_coreferent(anaphor, antecedent, ctx):
                    ctx.clusters.merge(anaphor, antecedent)
                    merges_nb += 1
                    break
        return merges_nb

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class ExactStringMatch(Sieve):
    """Link two non-pronominal mentions with the same text, ignoring
    case and leading determiners (*the Denver Broncos* / *Denver
    Broncos*)."""

    name = "exact_string_match"

    def is_coreferent(
        self, anaphor: Mention, antecedent: Mention, ctx: SieveContext
    ) -> bool:
        if antecedent.is_pronoun():
            return False
        return anaphor.normalized != "" and anaphor.normalized == antecedent.normalized


class RelaxedStringMatch(Sieve):
    """Link two non-pronominal mentions whose texts, cut after their
    head word, are the same (*Clinton* / *Clinton, whose term ended
    in 2001*)."""

    name = "relaxed_string_match"

    def is_coreferent(
        self, anaphor: Mention, antecedent: Mention, ctx: SieveContext
    ) -> bool:
        if antecedent.is_pronoun():
            return False
        return anaphor.relaxed != "" and anaphor.relaxed == antecedent.relaxed


class PreciseConstructs(Sieve):
    """Link mentions in specific syntactic or lexical constructs:
    appositives, role appositives, predicate nominatives, acronyms,
    relative pronouns and demonyms.
    """

    name = "precise_constructs"

    def considers(self, anaphor: Mention, ctx: SieveContext) -> bool:
        if not ctx.clusters.is_first_of_cluster(anaphor):
            return False
        return not anaphor.is_pronoun() or anaphor.is_relative

    def is_coreferent(
        self, anaphor: Mention, antecedent: Mention, ctx: SieveContext
    ) -> bool:
        if anaphor.is_relative:
            return self.is_relative_pronoun_of(anaphor, antecedent, ctx)

        if antecedent.is_pronoun() and not anaphor.sent_idx == antecedent.sent_idx:
            return False

        return (
            self.is_appositive(anaphor, antecedent, ctx)
            or self.is_role_appositive(anaphor, antecedent, ctx)
            or self.is_predicate_nominative(anaphor, antecedent, ctx)
            or self.is_acronym(anaphor, antecedent)
            or self.is_demonym(anaphor, antecedent, ctx)
        )

    @staticmethod
    def _same_parse(
        anaphor: Mention, antecedent: Mention, ctx: SieveContext
    ) -> Optional[Tree]:
        if anaphor.sent_idx != antecedent.sent_idx:
            return None
        if anaphor.tree_position is None or antecedent.tree_position is None:
            return None
        return ctx.trees[anaphor.sent_idx]

    def is_appositive(
        self, anaphor: Mention, antecedent: Mention, ctx: SieveContext
    ) -> bool:
        """*[Dan Ramage], [the engineer], ...*: two NP siblings under an
        NP, separated by a comma, in a NP that is not a coordination.
        """
        tree = PreciseConstructs._same_parse(anaphor, antecedent, ctx)
        if tree is None or antecedent.is_pronoun():
            return False
        assert not anaphor.tree_position is None
        assert not antecedent.tree_position is None
        parent = anaphor.tree_position[:-1]
        if antecedent.tree_position[:-1] != parent or len(anaphor.tree_position) == 0:
            return False
        parent_node = tree[parent]
        if base_label(parent_node) != "NP":
            return False
        labels = [base_label(child) for child in parent_node]
        if "CC" in labels or "CONJP" in labels:
            return False
        i, j = antecedent.tree_position[-1], anaphor.tree_position[-1]
        if not i < j:
            return False
        if base_label(parent_node[i]) != "NP" or base_label(parent_node[j]) != "NP":
            return False
        return labels[i + 1 : j] == [","]

    def is_role_appositive(
        self, anaphor: Mention, antecedent: Mention, ctx: SieveContext
    ) -> bool:
        """*[actress] [Rebecca Black]*: an animate nominal immediately
        followed by a person name"""
        if anaphor.sent_idx != antecedent.sent_idx:
            return False
        return (
            antecedent.mention_type == MentionType.NOMINAL
            and antecedent.animacy == Animacy.ANIMATE
            and anaphor.mention_type == MentionType.PROPER
            and anaphor.entity_type == EntityType.PERSON
            and antecedent.end_idx == anaphor.start_idx
        )

    def is_predicate_nominative(
        self, anaphor: Mention, antecedent: Mention, ctx: SieveContext
    ) -> bool:
        """*[Denver] is [a big city]*: the subject and the nominal
        complement of a copula."""
        tree = PreciseConstructs._same_parse(anaphor, antecedent, ctx)
        if tree is None:
            return False
        assert not anaphor.tree_position is None
        assert not antecedent.tree_position is None
        if len(antecedent.tree_position) == 0:
            return False
        clause = antecedent.tree_position[:-1]
        if not base_label(tree[clause]) in ("S", "SQ", "SINV"):
            return False
        for child_i, child in enumerate(tree[clause]):
            if child_i <= antecedent.tree_position[-1]:
                continue
            if isinstance(child, Tree) and base_label(child) == "VP":
                complements = PreciseConstructs._copula_complements(
                    tree, clause + (child_i,)
                )
                if anaphor.tree_position in complements:
                    return True
        return False

    @staticmethod
    def _copula_complements(tree: Tree, vp: TreePosition) -> List[TreePosition]:
        """Positions of the NP complements of a copula VP (*is a city*,
        *has been a city*)"""
        node = tree[vp]
        verb = None
        for child_i, child in enumerate(node):
            if not isinstance(child, Tree):
                continue
            label = base_label(child)
            if verb is None:
                if label.startswith("VB") or label == "MD":
                    verb = child.leaves()[0].lower()
                    if not verb in AUXILIARIES:
                        return []
                continue
            if label == "NP" and verb in COPULAS:
                return [vp + (child_i,)]
            if label == "VP":
                return PreciseConstructs._copula_complements(tree, vp + (child_i,))
            if label in ("RB", "ADVP"):
                continue
            return []
        return []

    def is_acronym(self, anaphor: Mention, antecedent: Mention) -> bool:
        """*[International Business Machines]* / *[IBM]*"""
        if (
            anaphor.mention_type != MentionType.PROPER
            or antecedent.mention_type != MentionType.PROPER
        ):
            return False

        def is_acronym_of(acronym: List[str], words: List[str]) -> bool:
            if len(acronym) != 1 or len(words) < 2:
                return False
            letters = acronym[0].replace(".", "")
            if len(letters) < 2 or not letters.isupper():
                return False
            initials = "".join(w[0] for w in words if w[:1].isupper())
            return initials == letters

        return is_acronym_of(anaphor.tokens, antecedent.tokens) or is_acronym_of(
            antecedent.tokens, anaphor.tokens
        )

    def is_relative_pronoun_of(
        self, anaphor: Mention, antecedent: Mention, ctx: SieveContext
    ) -> bool:
        """*[the man] [who] left*: a relative pronoun and the NP its
        relative clause modifies"""
        tree = PreciseConstructs._same_parse(anaphor, antecedent, ctx)
        if tree is None:
            return False
        assert not anaphor.tree_position is None
        assert not antecedent.tree_position is None
        position = anaphor.tree_position
        if len(position) < 3:
            return False
        if base_label(tree[position[:-1]]) != "WHNP":
            return False
        if base_label(tree[position[:-2]]) != "SBAR":
            return False
        np = position[:-3]
        if base_label(tree[np]) != "NP":
            return False
        return antecedent.tree_position[:-1] == np and (
            antecedent.tree_position[-1] < position[-3]
        )

    def is_demonym(
        self, anaphor: Mention, antecedent: Mention, ctx: SieveContext
    ) -> bool:
        """*[Germany]* / *[the Germans]*"""
        if anaphor.is_pronoun() or antecedent.is_pronoun():
            return False
        return ctx.dictionaries.are_demonym_related(
            anaphor.normalized, antecedent.normalized
        )


def _cluster_words(cluster: List[Mention]) -> Set[str]:
    return set(flatten(m.content_words for m in cluster if not m.is_pronoun()))


def _entity_types_agree(type1: EntityType, type2: EntityType) -> bool:
    return type1 == type2 or EntityType.NONE in (type1, type2)


class StrictHeadMatch(Sieve):
    """Link a mention to an antecedent cluster containing a mention
    with the same head word.

    :param word_inclusion: if ``True``, the non-stop words of the
        anaphor cluster must all appear in the antecedent cluster
    :param compatible_modifiers: if ``True``, the modifiers of the
        anaphor must all appear in the antecedent modifiers
    """

    def __init__(self, word_inclusion: bool = True, compatible_modifiers: bool = True):
        self.word_inclusion = word_inclusion
        self.compatible_modifiers = compatible_modifiers

    def considers(self, anaphor: Mention, ctx: SieveContext) -> bool:
        # an indefinite first mention introduces a new entity
        return super().considers(anaphor, ctx) and not anaphor.is_indefinite

    def is_coreferent(
        self, anaphor: Mention, antecedent: Mention, ctx: SieveContext
    ) -> bool:
        if antecedent.is_pronoun():
            return False
        antecedent_cluster = ctx.cluster_of(antecedent)
        antecedent_heads = {
            m.head_word.lower() for m in antecedent_cluster if not m.is_pronoun()
        }
        if not anaphor.head_word.lower() in antecedent_heads:
            return False
        if not _entity_types_agree(anaphor.entity_type, antecedent.entity_type):
            return False
        if self.word_inclusion:
            anaphor_words = _cluster_words(ctx.cluster_of(anaphor))
            if not anaphor_words.issubset(_cluster_words(antecedent_cluster)):
                return False
        if self.compatible_modifiers:
            if not anaphor.modifiers.issubset(antecedent.modifiers):
                return False
        return True

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(word_inclusion={self.word_inclusion}, compatible_modifiers={self.compatible_modifiers})"


class StrictHeadMatch1(StrictHeadMatch):
    name = "strict_head_match_1"

    def __init__(self):
        super().__init__(word_inclusion=True, compatible_modifiers=True)


class StrictHeadMatch2(StrictHeadMatch):
    name = "strict_head_match_2"

    def __init__(self):
        super().__init__(word_inclusion=True, compatible_modifiers=False)


class StrictHeadMatch3(StrictHeadMatch):
    name = "strict_head_match_3"

    def __init__(self):
        super().__init__(word_inclusion=False, compatible_modifiers=True)


class ProperHeadMatch(Sieve):
    """Link two proper mentions with the same head word, unless they
    mention different numbers (*Apollo 11* / *Apollo 13*) or
    different locations (*Paris Hilton* / *London Hilton*)."""

    name = "proper_head_match"

    def considers(self, anaphor: Mention, ctx: SieveContext) -> bool:
        return (
            super().considers(anaphor, ctx)
            and anaphor.mention_type == MentionType.PROPER
        )

    def is_coreferent(
        self, anaphor: Mention, antecedent: Mention, ctx: SieveContext
    ) -> bool:
        if antecedent.mention_type != MentionType.PROPER:
            return False
        if anaphor.head_word.lower() != antecedent.head_word.lower():
            return False
        if anaphor.numbers != antecedent.numbers and (
            len(anaphor.numbers) > 0 or len(antecedent.numbers) > 0
        ):
            return False
        anaphor_locations = self._location_modifiers(anaphor, ctx)
        antecedent_locations = self._location_modifiers(antecedent, ctx)
        if not anaphor_locations.issubset(antecedent_locations):
            return False
        return True

    @staticmethod
    def _location_modifiers(mention: Mention, ctx: SieveContext) -> FrozenSet[str]:
        sentence = ctx.document.sentences[mention.sent_idx]
        return frozenset(
            token.text.lower()
            for token in sentence.tokens[mention.start_idx : mention.head_idx]
            if token.pos in PROPER_NOUN_TAGS
            and entity_type_from_tag(token.ner) == EntityType.LOCATION
        )


class PronounMatch(Sieve):
    """Resolve pronouns to an agreeing antecedent, in a window of
    sentences before the pronoun.

    First person pronouns with a known speaker can also be linked to
    the first person pronouns of the same speaker, anywhere before.
    """

    name = "pronoun_match"

    def considers(self, anaphor: Mention, ctx: SieveContext) -> bool:
        return (
            anaphor.is_pronoun()
            and not anaphor.is_relative
            and ctx.clusters.is_first_of_cluster(anaphor)
        )

    def candidates(self, anaphor: Mention, ctx: SieveContext) -> Iterable[Mention]:
        candidates = search_order(anaphor, ctx, window=ctx.pronoun_window)
        if anaphor.person == Person.FIRST and not anaphor.speaker is None:
            window_start = anaphor.sent_idx - ctx.pronoun_window
            for sent_idx in range(window_start - 1, -1, -1):
                candidates += [
                    m
                    for m in ctx.mentions_by_sentence[sent_idx]
                    if m.person == Person.FIRST and m.speaker == anaphor.speaker
                ]
        return candidates

    def is_coreferent(
        self, anaphor: Mention, antecedent: Mention, ctx: SieveContext
    ) -> bool:
        if anaphor.person in (Person.FIRST, Person.SECOND):
            if not antecedent.is_pronoun() or antecedent.person != anaphor.person:
                return False
            if antecedent.speaker != anaphor.speaker:
                return False
        elif antecedent.person in (Person.FIRST, Person.SECOND):
            return False

        for attribute in ("gender", "number", "animacy"):
            if not attributes_are_compatible(
                getattr(anaphor, attribute), getattr(antecedent, attribute)
            ):
                return False

        if antecedent.is_relative:
            return False

        return self.respects_binding(anaphor, antecedent, ctx)

    def respects_binding(
        self, anaphor: Mention, antecedent: Mention, ctx: SieveContext
    ) -> bool:
        """Check binding constraints: a reflexive pronoun must be bound
        in its minimal clause, and a non-reflexive pronoun can't be
        bound by an argument of its own minimal clause (*John saw
        him*).
        """
        if anaphor.sent_idx != antecedent.sent_idx:
            return not anaphor.is_reflexive
        tree = ctx.trees[anaphor.sent_idx]
        if tree is None or anaphor.tree_position is None or antecedent.tree_position is None:
            return True
        clause = clause_position(tree, anaphor.tree_position)
        antecedent_is_argument = is_argument_of(tree, antecedent.tree_position, clause)
        if anaphor.is_reflexive:
            return antecedent_is_argument
        if anaphor.is_possessive:
            return True
        return not (
            antecedent_is_argument
            and is_argument_of(tree, anaphor.tree_position, clause)
        )


#: sieves, in their application order
SIEVES: List[Type[Sieve]] = [
    ExactStringMatch,
    RelaxedStringMatch,
    PreciseConstructs,
    StrictHeadMatch1,
    StrictHeadMatch2,
    StrictHeadMatch3,
    ProperHeadMatch,
    PronounMatch,
]

SIEVES_BY_NAME: Dict[str, Type[Sieve]] = {sieve.name: sieve for sieve in SIEVES}


def make_sieves(names: Optional[Iterable[str]] = None) -> List[Sieve]:
    """Instantiate sieves from their names.  Whatever the order of
    ``names``, sieves are returned in their fixed application order.

    :param names: names of the enabled sieves.  If ``None``, all
        sieves are enabled.

    :raise ValueError: if a sieve name is unknown
    """
    if names is None:
        return [sieve_class() for sieve_class in SIEVES]
    names = set(names)
    unknown = names - set(SIEVES_BY_NAME.keys())
    if len(unknown) > 0:
        raise ValueError(
            f"[error] unknown sieve(s): {sorted(unknown)} (available sieves: {list(SIEVES_BY_NAME.keys())})"
        )
    return [sieve_class() for sieve_class in SIEVES if sieve_class.name in names]
