from __future__ import annotations
from enum import Enum
from typing import Optional


class Gender(Enum):
    UNKNOWN = 0
    MALE = 1
    FEMALE = 2
    NEUTRAL = 3


class Number(Enum):
    UNKNOWN = 0
    SINGULAR = 1
    PLURAL = 2


class Animacy(Enum):
    UNKNOWN = 0
    ANIMATE = 1
    INANIMATE = 2


class Person(Enum):
    UNKNOWN = 0
    FIRST = 1
    SECOND = 2
    THIRD = 3


class MentionType(Enum):
    PRONOMINAL = 0
    PROPER = 1
    NOMINAL = 2


class EntityType(Enum):
    """Coarse named entity type of a mention"""

    NONE = 0
    PERSON = 1
    ORGANIZATION = 2
    LOCATION = 3
    MISC = 4
    #: dates, times, money, percents, quantities...
    NUMERIC = 5


#: maps fine-grained NER tags (CoreNLP, CoNLL-2003 and OntoNotes
#: tagsets) to a coarse :class:`EntityType`
NER_TAG_TO_ENTITY_TYPE = {
    "PERSON": EntityType.PERSON,
    "PER": EntityType.PERSON,
    "ORGANIZATION": EntityType.ORGANIZATION,
    "ORG": EntityType.ORGANIZATION,
    "LOCATION": EntityType.LOCATION,
    "LOC": EntityType.LOCATION,
    "GPE": EntityType.LOCATION,
    "FAC": EntityType.LOCATION,
    "MISC": EntityType.MISC,
    "NORP": EntityType.MISC,
    "EVENT": EntityType.MISC,
    "PRODUCT": EntityType.MISC,
    "WORK_OF_ART": EntityType.MISC,
    "LAW": EntityType.MISC,
    "LANGUAGE": EntityType.MISC,
    "DATE": EntityType.NUMERIC,
    "TIME": EntityType.NUMERIC,
    "DURATION": EntityType.NUMERIC,
    "SET": EntityType.NUMERIC,
    "MONEY": EntityType.NUMERIC,
    "PERCENT": EntityType.NUMERIC,
    "NUMBER": EntityType.NUMERIC,
    "ORDINAL": EntityType.NUMERIC,
    "CARDINAL": EntityType.NUMERIC,
    "QUANTITY": EntityType.NUMERIC,
}


def strip_bio_prefix(tag: str) -> str:
    """Remove a BIO/BIOES prefix from a NER tag (``B-PER`` => ``PER``)"""
    if len(tag) > 2 and tag[1] == "-" and tag[0] in "BIESL":
        return tag[2:]
    return tag


def entity_type_from_tag(tag: Optional[str]) -> EntityType:
    """Convert a NER tag to a coarse :class:`EntityType`.

    Unknown tags that are not ``O`` are considered ``MISC``.
    """
    if tag is None:
        return EntityType.NONE
    tag = strip_bio_prefix(tag)
    if tag in ("O", ""):
        return EntityType.NONE
    return NER_TAG_TO_ENTITY_TYPE.get(tag.upper(), EntityType.MISC)


def attributes_are_compatible(value1: Enum, value2: Enum) -> bool:
    """Two attribute values are compatible if one of them is unknown
    or if they are equal.

    .. note::

        every attribute enum uses ``0`` for its unknown value.
    """
    return value1.value == 0 or value2.value == 0 or value1 == value2


def merged_attribute(value1: Enum, value2: Enum) -> Enum:
    """Merge two attribute values of the same enum.

    An unknown value takes the other value.  Conflicting values are
    downgraded to unknown.
    """
    if value1 == value2 or value2.value == 0:
        return value1
    if value1.value == 0:
        return value2
    return type(value1)(0)
