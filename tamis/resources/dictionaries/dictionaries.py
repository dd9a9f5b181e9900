from typing import Dict, FrozenSet, Mapping, Optional
from types import MappingProxyType
import os, sys
from tamis.attributes import Animacy, Gender, Number

script_dir = os.path.dirname(os.path.abspath(__file__))

#: paths of the word lists bundled with tamis
DEFAULT_PATHS = {
    "male": f"{script_dir}/datas/male.txt",
    "female": f"{script_dir}/datas/female.txt",
    "neutral": f"{script_dir}/datas/neutral.txt",
    "animate": f"{script_dir}/datas/animate.txt",
    "inanimate": f"{script_dir}/datas/inanimate.txt",
    "singular": f"{script_dir}/datas/singular.txt",
    "plural": f"{script_dir}/datas/plural.txt",
    "demonyms": f"{script_dir}/datas/demonyms.csv",
}


def load_word_list(path: str) -> FrozenSet[str]:
    """Load a word list, with one word per line.  Empty lines and
    lines starting with ``#`` are ignored.  Words are lowercased.

    :raise ValueError: if the file can't be read
    """
    words = set()
    try:
        with open(path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line == "" or line.startswith("#"):
                    continue
                words.add(line.lower())
    except (OSError, UnicodeDecodeError) as e:
        raise ValueError(f"[error] could not load word list {path}: {e}") from e
    return frozenset(words)


def load_demonyms(path: str) -> Mapping[str, FrozenSet[str]]:
    """Load a demonym list.  Each line has the form
    ``place,demonym1,demonym2...``.

    :return: a read-only mapping from a place name to its demonyms
    :raise ValueError: if the file can't be read or is malformed
    """
    place_to_demonyms: Dict[str, set] = {}
    try:
        with open(path, encoding="utf-8") as f:
            for line_i, line in enumerate(f):
                line = line.strip()
                if line == "" or line.startswith("#"):
                    continue
                splitted = [s.strip().lower() for s in line.split(",")]
                if len(splitted) < 2 or any(s == "" for s in splitted):
                    raise ValueError(
                        f"[error] malformed demonym line {line_i + 1} in {path}: '{line}'"
                    )
                place_to_demonyms.setdefault(splitted[0], set()).update(splitted[1:])
    except (OSError, UnicodeDecodeError) as e:
        raise ValueError(f"[error] could not load demonyms {path}: {e}") from e
    return MappingProxyType(
        {place: frozenset(demonyms) for place, demonyms in place_to_demonyms.items()}
    )


class CorefDictionaries:
    """Static lexical resources used to compute mention attributes.

    Every table is loaded at construction time, and is read-only
    afterwards: a single :class:`CorefDictionaries` can be shared
    between documents resolved concurrently.

    .. note::

        the default lists bundled with tamis are small.  For better
        results, pass larger word lists (for example, the gender and
        animacy lists of Bergsma and Lin (2006) or Ji and Lin (2009)).
    """

    supported_langs = {"eng"}

    def __init__(
        self,
        male_path: Optional[str] = None,
        female_path: Optional[str] = None,
        neutral_path: Optional[str] = None,
        animate_path: Optional[str] = None,
        inanimate_path: Optional[str] = None,
        singular_path: Optional[str] = None,
        plural_path: Optional[str] = None,
        demonyms_path: Optional[str] = None,
        lang: str = "eng",
    ):
        """
        :param male_path: male words list.  All ``*_path`` parameters
            default to the lists bundled with tamis.
        :param lang: dictionaries language.  Must be in
            ``CorefDictionaries.supported_langs``.

        :raise ValueError: if one of the resources can't be loaded
        """
        if not lang in CorefDictionaries.supported_langs:
            print(
                f"[warning] {lang} not supported by {type(self)} (supported languages: {CorefDictionaries.supported_langs})",
                file=sys.stderr,
            )
        self.lang = lang

        self.male_words = load_word_list(male_path or DEFAULT_PATHS["male"])
        self.female_words = load_word_list(female_path or DEFAULT_PATHS["female"])
        self.neutral_words = load_word_list(neutral_path or DEFAULT_PATHS["neutral"])
        self.animate_words = load_word_list(animate_path or DEFAULT_PATHS["animate"])
        self.inanimate_words = load_word_list(
            inanimate_path or DEFAULT_PATHS["inanimate"]
        )
        self.singular_words = load_word_list(
            singular_path or DEFAULT_PATHS["singular"]
        )
        self.plural_words = load_word_list(plural_path or DEFAULT_PATHS["plural"])
        self.place_to_demonyms = load_demonyms(
            demonyms_path or DEFAULT_PATHS["demonyms"]
        )

    def gender(self, word: str) -> Gender:
        """Lookup the gender of a word.  A word found in several
        gender lists has an unknown gender."""
        word = word.lower()
        genders = [
            gender
            for gender, words in (
                (Gender.MALE, self.male_words),
                (Gender.FEMALE, self.female_words),
                (Gender.NEUTRAL, self.neutral_words),
            )
            if word in words
        ]
        if len(genders) != 1:
            return Gender.UNKNOWN
        return genders[0]

    def animacy(self, word: str) -> Animacy:
        word = word.lower()
        is_animate = word in self.animate_words
        is_inanimate = word in self.inanimate_words
        if is_animate == is_inanimate:
            return Animacy.UNKNOWN
        return Animacy.ANIMATE if is_animate else Animacy.INANIMATE

    def number(self, word: str) -> Number:
        word = word.lower()
        is_singular = word in self.singular_words
        is_plural = word in self.plural_words
        if is_singular == is_plural:
            return Number.UNKNOWN
        return Number.SINGULAR if is_singular else Number.PLURAL

    def is_demonym_of(self, demonym: str, place: str) -> bool:
        """Check if ``demonym`` denotes people from ``place``"""
        return demonym.lower() in self.place_to_demonyms.get(place.lower(), frozenset())

    def are_demonym_related(self, name1: str, name2: str) -> bool:
        """Check if one name is a demonym of the other"""
        if name1 == "" or name2 == "":
            return False
        return self.is_demonym_of(name1, name2) or self.is_demonym_of(name2, name1)
