from typing import Dict, FrozenSet
from tamis.attributes import Animacy, Gender, Number, Person

first_person_singular_pronouns = {"eng": frozenset({"i", "me", "my", "mine", "myself"})}
first_person_plural_pronouns = {
    "eng": frozenset({"we", "us", "our", "ours", "ourselves"})
}
second_person_pronouns = {
    "eng": frozenset({"you", "your", "yours", "yourself", "yourselves"})
}
males_pronouns = {"eng": frozenset({"he", "him", "his", "himself"})}
females_pronouns = {"eng": frozenset({"she", "her", "hers", "herself"})}
neutral_pronouns = {"eng": frozenset({"it", "its", "itself"})}
third_person_plural_pronouns = {
    "eng": frozenset({"they", "them", "their", "theirs", "themselves"})
}
relative_pronouns = {"eng": frozenset({"who", "whom", "whose", "which", "that"})}
reflexive_pronouns = {
    "eng": frozenset(
        {
            "myself",
            "yourself",
            "himself",
            "herself",
            "itself",
            "ourselves",
            "yourselves",
            "themselves",
        }
    )
}
possessive_pronouns = {
    "eng": frozenset(
        {
            "my",
            "mine",
            "your",
            "yours",
            "his",
            "her",
            "hers",
            "its",
            "our",
            "ours",
            "their",
            "theirs",
            "whose",
        }
    )
}


def _lang_table(table: Dict[str, FrozenSet[str]], lang: str) -> FrozenSet[str]:
    try:
        return table[lang]
    except KeyError:
        raise ValueError(
            f"unsupported lang for pronouns: {lang} (supported langs: {list(table.keys())})"
        )


def all_pronouns(lang: str = "eng") -> FrozenSet[str]:
    return frozenset().union(
        *[
            _lang_table(table, lang)
            for table in (
                first_person_singular_pronouns,
                first_person_plural_pronouns,
                second_person_pronouns,
                males_pronouns,
                females_pronouns,
                neutral_pronouns,
                third_person_plural_pronouns,
                relative_pronouns,
            )
        ]
    )


def is_a_pronoun(word: str, lang: str = "eng") -> bool:
    return word.lower() in all_pronouns(lang)


def is_a_reflexive_pronoun(word: str, lang: str = "eng") -> bool:
    return word.lower() in _lang_table(reflexive_pronouns, lang)


def pronoun_gender(word: str, lang: str = "eng") -> Gender:
    word = word.lower()
    if word in _lang_table(males_pronouns, lang):
        return Gender.MALE
    if word in _lang_table(females_pronouns, lang):
        return Gender.FEMALE
    if word in _lang_table(neutral_pronouns, lang) or word == "which":
        return Gender.NEUTRAL
    return Gender.UNKNOWN


def pronoun_number(word: str, lang: str = "eng") -> Number:
    word = word.lower()
    if word in ("yourself",):
        return Number.SINGULAR
    if word in ("yourselves",):
        return Number.PLURAL
    if (
        word in _lang_table(first_person_singular_pronouns, lang)
        or word in _lang_table(males_pronouns, lang)
        or word in _lang_table(females_pronouns, lang)
        or word in _lang_table(neutral_pronouns, lang)
    ):
        return Number.SINGULAR
    if word in _lang_table(first_person_plural_pronouns, lang) or word in _lang_table(
        third_person_plural_pronouns, lang
    ):
        return Number.PLURAL
    return Number.UNKNOWN


def pronoun_person(word: str, lang: str = "eng") -> Person:
    word = word.lower()
    if word in _lang_table(first_person_singular_pronouns, lang) or word in _lang_table(
        first_person_plural_pronouns, lang
    ):
        return Person.FIRST
    if word in _lang_table(second_person_pronouns, lang):
        return Person.SECOND
    if word in all_pronouns(lang):
        return Person.THIRD
    return Person.UNKNOWN


def pronoun_animacy(word: str, lang: str = "eng") -> Animacy:
    word = word.lower()
    if word in _lang_table(neutral_pronouns, lang) or word == "which":
        return Animacy.INANIMATE
    if word in ("who", "whom", "whose") or pronoun_person(word, lang) in (
        Person.FIRST,
        Person.SECOND,
    ):
        return Animacy.ANIMATE
    if word in _lang_table(males_pronouns, lang) or word in _lang_table(
        females_pronouns, lang
    ):
        return Animacy.ANIMATE
    return Animacy.UNKNOWN
