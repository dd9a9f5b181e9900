import pytest
from tamis.pipeline.core import Document, Sentence
from tamis.pipeline.corefs import Resolver


def make_document(*sentences) -> Document:
    """Create a document from ``(parse, ner)`` pairs.  ``ner`` maps a
    token index to its NER tag: other tokens are tagged ``O``."""
    doc_sentences = []
    for parse, ner in sentences:
        sentence = Sentence.from_parse(parse)
        for token_i, tag in ner.items():
            sentence.tokens[token_i].ner = tag
        doc_sentences.append(sentence)
    return Document(doc_sentences)


def dan_ramage_document() -> Document:
    """Dan Ramage is working for Microsoft. He's in Seattle! At least,
    he used to be. Ed is not in Seattle."""
    return make_document(
        (
            "(ROOT (S (NP (NNP Dan) (NNP Ramage)) (VP (VBZ is) (VP (VBG working) (PP (IN for) (NP (NNP Microsoft))))) (. .)))",
            {0: "PERSON", 1: "PERSON", 5: "ORGANIZATION"},
        ),
        (
            "(ROOT (S (NP (PRP He)) (VP (VBZ 's) (PP (IN in) (NP (NNP Seattle)))) (. !)))",
            {3: "LOCATION"},
        ),
        (
            "(ROOT (S (ADVP (IN At) (JJS least)) (, ,) (NP (PRP he)) (VP (VBD used) (S (VP (TO to) (VP (VB be))))) (. .)))",
            {},
        ),
        (
            "(ROOT (S (NP (NNP Ed)) (VP (VBZ is) (RB not) (PP (IN in) (NP (NNP Seattle)))) (. .)))",
            {0: "PERSON", 4: "LOCATION"},
        ),
    )


def your_mom_document() -> Document:
    """Your mom thinks she lives in Denver, but it's a big city. She
    actually lives outside of Denver."""
    return make_document(
        (
            "(ROOT (S (S (NP (PRP$ Your) (NN mom)) (VP (VBZ thinks) (SBAR (S (NP (PRP she)) (VP (VBZ lives) (PP (IN in) (NP (NNP Denver)))))))) (, ,) (CC but) (S (NP (PRP it)) (VP (VBZ 's) (NP (DT a) (JJ big) (NN city)))) (. .)))",
            {6: "LOCATION"},
        ),
        (
            "(ROOT (S (NP (PRP She)) (ADVP (RB actually)) (VP (VBZ lives) (ADVP (RB outside) (PP (IN of) (NP (NNP Denver))))) (. .)))",
            {5: "LOCATION"},
        ),
    )


@pytest.fixture(scope="module")
def resolver() -> Resolver:
    return Resolver(warn=False)
