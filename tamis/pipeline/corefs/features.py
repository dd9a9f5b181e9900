from typing import Dict, List, Optional
from more_itertools import first_true
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
from tamis.pipeline.core import Document, Sentence, Token
from tamis.pipeline.corefs.mentions import Mention
from tamis.resources.determiners import (
    indefinite_determiners,
    leading_determiners,
    plural_determiners,
    singular_determiners,
)
from tamis.resources.dictionaries import CorefDictionaries
from tamis.resources.pronouns import (
    all_pronouns,
    possessive_pronouns,
    pronoun_animacy,
    pronoun_gender,
    pronoun_number,
    pronoun_person,
    reflexive_pronouns,
    relative_pronouns,
)
from tamis.resources.titles import is_a_female_title, is_a_male_title, is_a_title
from tamis.trees import (
    NOUN_TAGS,
    PLURAL_NOUN_TAGS,
    PROPER_NOUN_TAGS,
    base_label,
    head_position,
    node_spans,
)

PUNCTUATION_TAGS = {",", ".", ":", "``", "''", "-LRB-", "-RRB-", "#", "$", "HYPH"}

#: words ignored when comparing the words of two mentions
STOP_WORDS = {"of", "and", "or", "'s", "'", ",", "-", "the", "a", "an"}

MODIFIER_TAGS = NOUN_TAGS | {"JJ", "JJR", "JJS", "CD", "VBN", "VBG"}


class FeatureExtractor:
    """Compute the features of mentions (head, gender, number,
    animacy, person, speaker, entity type and normalized strings).

    Unknown values are explicit: every attribute leaves the extractor
    set to a concrete value or to its ``UNKNOWN`` member.
    """

    def __init__(self, dictionaries: CorefDictionaries, lang: str = "eng"):
        self.dictionaries = dictionaries
        self.lang = lang

        self.pronouns = all_pronouns(lang)
        self.leading_determiners = leading_determiners[lang]
        self.singular_determiners = singular_determiners[lang]
        self.plural_determiners = plural_determiners[lang]
        self.indefinite_determiners = indefinite_determiners[lang]

    def __call__(
        self,
        document: Document,
        mentions: List[Mention],
        trees: List[Optional[Tree]],
    ):
        """Set the features of all ``mentions`` of ``document`` in place

        :param trees: the usable parse of each sentence (``None`` for
            sentences without a usable parse)
        """
        # sentence index => spans of tree nodes
        spans_cache: Dict[int, dict] = {}
        for mention in mentions:
            sentence = document.sentences[mention.sent_idx]
            tree = trees[mention.sent_idx]
            spans = None
            if not tree is None:
                if not mention.sent_idx in spans_cache:
                    spans_cache[mention.sent_idx] = node_spans(tree)
                spans = spans_cache[mention.sent_idx]
            self.set_features_(mention, sentence, tree, spans)

    def set_features_(
        self,
        mention: Mention,
        sentence: Sentence,
        tree: Optional[Tree] = None,
        spans: Optional[dict] = None,
    ):
        tokens = sentence.tokens[mention.start_idx : mention.end_idx]

        mention.head_idx = self._head_idx(mention, sentence, tree, spans)
        head = sentence.tokens[mention.head_idx]
        mention.head_word = head.text
        head_lemma = (head.lemma or head.text).lower()

        if mention.mention_type == MentionType.NOMINAL and head.pos in PROPER_NOUN_TAGS:
            mention.mention_type = MentionType.PROPER

        mention.entity_type = entity_type_from_tag(head.ner)
        if mention.mention_type == MentionType.PRONOMINAL:
            mention.entity_type = EntityType.NONE

        words = [t.text.lower() for t in tokens]
        head_offset = mention.head_idx - mention.start_idx
        pos_tags = [t.pos for t in tokens]

        if mention.mention_type == MentionType.PRONOMINAL:
            word = words[0]
            mention.number = pronoun_number(word, self.lang)
            mention.gender = pronoun_gender(word, self.lang)
            mention.animacy = pronoun_animacy(word, self.lang)
            mention.person = pronoun_person(word, self.lang)
            mention.is_reflexive = word in reflexive_pronouns[self.lang]
            mention.is_relative = word in relative_pronouns[self.lang]
            mention.is_possessive = pos_tags[0] in ("PRP$", "WP$") or (
                pos_tags[0] is None
                and word in possessive_pronouns[self.lang]
                and word != "her"
            )
            if mention.person in (Person.FIRST, Person.SECOND):
                mention.speaker = tokens[0].speaker or sentence.speaker
        else:
            mention.number = self._number(mention, words, head, head_lemma, tree)
            mention.gender = self._gender(
                mention, words[: head_offset + 1], head_lemma
            )
            mention.animacy = self._animacy(mention, head_lemma)
            mention.person = Person.THIRD
            mention.is_indefinite = words[0] in self.indefinite_determiners or (
                mention.mention_type == MentionType.NOMINAL
                and head.pos == "NNS"
                and not pos_tags[0] in ("DT", "PRP$", "POS", "CD")
            )

        mention.normalized = self._normalized(tokens)
        mention.relaxed = self._normalized(tokens[: head_offset + 1])
        mention.modifiers = frozenset(
            t.text.lower()
            for t in tokens[:head_offset]
            if t.pos in MODIFIER_TAGS and not t.text.lower() in self.leading_determiners
        )
        mention.content_words = frozenset(
            w
            for w, pos in zip(words, pos_tags)
            if not w in STOP_WORDS
            and not w in self.leading_determiners
            and not pos in PUNCTUATION_TAGS
            and not pos == "POS"
        )
        mention.numbers = frozenset(
            w for w, pos in zip(words, pos_tags) if pos == "CD" or w.isdigit()
        )

    def _head_idx(
        self,
        mention: Mention,
        sentence: Sentence,
        tree: Optional[Tree],
        spans: Optional[dict],
    ) -> int:
        if mention.mention_type == MentionType.PRONOMINAL:
            return mention.start_idx
        if not tree is None and not mention.tree_position is None:
            assert not spans is None
            head_start = spans[head_position(tree, mention.tree_position)][0]
            if mention.start_idx <= head_start < mention.end_idx:
                return head_start
        # rightmost token that is not a possessive marker or a
        # punctuation
        candidates = range(mention.end_idx - 1, mention.start_idx - 1, -1)
        head_idx = first_true(
            candidates,
            default=None,
            pred=lambda i: not sentence.tokens[i].pos in PUNCTUATION_TAGS | {"POS"}
            and any(c.isalnum() for c in sentence.tokens[i].text),
        )
        if head_idx is None:
            return mention.end_idx - 1
        return head_idx

    def _normalized(self, tokens: List[Token]) -> str:
        words = [t.text.lower() for t in tokens]
        if len(words) > 1 and words[0] in self.leading_determiners:
            words = words[1:]
        while len(words) > 1 and words[-1] in ("'s", "'"):
            words = words[:-1]
        return " ".join(words)

    def _number(
        self,
        mention: Mention,
        words: List[str],
        head: Token,
        head_lemma: str,
        tree: Optional[Tree],
    ) -> Number:
        if not tree is None and not mention.tree_position is None:
            node = tree[mention.tree_position]
            labels = [base_label(c) for c in node if isinstance(c, Tree)]
            if ("CC" in labels or "CONJP" in labels) and labels.count("NP") >= 2:
                return Number.PLURAL
        if mention.entity_type in (EntityType.PERSON, EntityType.LOCATION):
            return Number.SINGULAR
        if mention.entity_type == EntityType.ORGANIZATION:
            return Number.UNKNOWN
        if words[0] in self.plural_determiners:
            return Number.PLURAL
        if words[0] in self.singular_determiners:
            return Number.SINGULAR
        dict_number = self.dictionaries.number(head_lemma)
        if dict_number != Number.UNKNOWN:
            return dict_number
        if head.pos in PLURAL_NOUN_TAGS:
            return Number.PLURAL
        if head.pos in ("NN", "NNP"):
            return Number.SINGULAR
        return Number.UNKNOWN

    def _gender(self, mention: Mention, words: List[str], head_lemma: str) -> Gender:
        """
        :param words: lowercased words of the mention, up to its head
        """
        if mention.entity_type in (EntityType.ORGANIZATION, EntityType.LOCATION):
            return Gender.NEUTRAL

        # titles: *Mr. Smith*, *Queen Elisabeth*
        title = first_true(words, default=None, pred=lambda w: is_a_title(w, self.lang))
        if not title is None:
            if is_a_male_title(title, self.lang):
                return Gender.MALE
            if is_a_female_title(title, self.lang):
                return Gender.FEMALE

        if mention.entity_type == EntityType.PERSON:
            # first name lookup
            first_name = first_true(
                words, default=None, pred=lambda w: not is_a_title(w, self.lang)
            )
            for word in (first_name, head_lemma):
                if word is None:
                    continue
                gender = self.dictionaries.gender(word)
                if gender in (Gender.MALE, Gender.FEMALE):
                    return gender
            return Gender.UNKNOWN

        return self.dictionaries.gender(head_lemma)

    def _animacy(self, mention: Mention, head_lemma: str) -> Animacy:
        if mention.entity_type == EntityType.PERSON:
            return Animacy.ANIMATE
        if mention.entity_type in (
            EntityType.ORGANIZATION,
            EntityType.LOCATION,
            EntityType.NUMERIC,
        ):
            return Animacy.INANIMATE
        animacy = self.dictionaries.animacy(head_lemma)
        if animacy != Animacy.UNKNOWN:
            return animacy
        # gendered common nouns (*king*, *mom*) denote persons
        if mention.gender in (Gender.MALE, Gender.FEMALE):
            return Animacy.ANIMATE
        return Animacy.UNKNOWN
