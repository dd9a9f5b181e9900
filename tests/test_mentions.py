from nltk import Tree
from tamis.attributes import MentionType
from tamis.pipeline.core import Document, Sentence, Token
from tamis.pipeline.corefs import MentionExtractor
from conftest import dan_ramage_document, make_document, your_mom_document


def spans(mentions):
    return [(m.sent_idx, m.start_idx, m.end_idx) for m in mentions]


def test_extracts_pronouns_proper_nouns_and_noun_phrases():
    mentions = MentionExtractor(warn=False)(your_mom_document())
    assert spans(mentions) == [
        (0, 0, 1),  # Your
        (0, 0, 2),  # Your mom
        (0, 3, 4),  # she
        (0, 6, 7),  # Denver
        (0, 9, 10),  # it
        (0, 11, 14),  # a big city
        (1, 0, 1),  # She
        (1, 5, 6),  # Denver
    ]
    assert [m.id for m in mentions] == list(range(1, len(mentions) + 1))
    assert mentions[0].mention_type == MentionType.PRONOMINAL
    assert mentions[3].mention_type == MentionType.PROPER
    assert mentions[5].mention_type == MentionType.NOMINAL


def test_proper_noun_spans_are_extended_to_named_entities():
    document = make_document(
        (
            "(ROOT (S (NP (NP (DT the) (NNP Denver) (NNPS Broncos))) (VP (VBD won)) (. .)))",
            {0: "ORGANIZATION", 1: "ORGANIZATION", 2: "ORGANIZATION"},
        )
    )
    mentions = MentionExtractor(warn=False)(document)
    # nested NPs with the same span are deduplicated
    assert spans(mentions) == [(0, 0, 3)]
    assert mentions[0].tree_position == (0, 0)


def test_containers_are_recorded():
    mentions = MentionExtractor(warn=False)(your_mom_document())
    your, your_mom = mentions[0], mentions[1]
    assert your.containers == {your_mom.id}
    assert your_mom.containers == set()
    assert your_mom.contains(your)


def test_numeric_noun_phrases_are_not_mentions():
    document = make_document(
        (
            "(ROOT (S (NP (PRP He)) (VP (VBD paid) (NP (CD 200) (NNS dollars)) (NP (CD 2)) ) (. .)))",
            {2: "MONEY", 3: "MONEY", 4: "NUMBER"},
        )
    )
    mentions = MentionExtractor(warn=False)(document)
    assert spans(mentions) == [(0, 0, 1)]


def test_pleonastic_it_is_not_a_mention():
    document = make_document(
        (
            "(ROOT (S (NP (PRP It)) (VP (VBZ is) (ADJP (JJ clear)) (SBAR (IN that) (S (NP (PRP he)) (VP (VBD left))))) (. .)))",
            {},
        ),
        ("(ROOT (S (NP (PRP It)) (VP (VBZ is) (VP (VBG raining))) (. .)))", {}),
    )
    mentions = MentionExtractor(warn=False)(document)
    assert [m.tokens for m in mentions] == [["he"]]


def test_relative_pronouns_are_only_extracted_in_relative_clauses():
    document = make_document(
        (
            "(ROOT (S (NP (NP (DT the) (NN man)) (SBAR (WHNP (WP who)) (S (VP (VBD left))))) (VP (VBD said) (SBAR (IN that) (S (NP (PRP he)) (VP (VBD lied))))) (. .)))",
            {},
        )
    )
    mentions = MentionExtractor(warn=False)(document)
    assert [m.tokens for m in mentions] == [
        ["the", "man"],
        ["the", "man", "who", "left"],
        ["who"],
        ["he"],
    ]


def test_sentence_without_parse_yields_pronouns_and_named_entities(capsys):
    sentence = Sentence.from_words(
        ["She", "met", "Dan", "Ramage", "in", "the", "city", "."],
        pos=["PRP", "VBD", "NNP", "NNP", "IN", "DT", "NN", "."],
        ner=["O", "O", "PERSON", "PERSON", "O", "O", "O", "O"],
    )
    mentions = MentionExtractor(warn=True)(Document([sentence]))
    assert spans(mentions) == [(0, 0, 1), (0, 2, 4)]
    assert all(m.tree_position is None for m in mentions)
    assert "[warning]" in capsys.readouterr().err


def test_malformed_parse_is_degraded(capsys):
    sentence = Sentence(
        [Token("He", "PRP"), Token("left", "VBD"), Token(".", ".")],
        Tree.fromstring("(ROOT (S (NP (PRP She)) (VP (VBD came)) (. .)))"),
    )
    mentions = MentionExtractor(warn=True)(Document([sentence]))
    assert spans(mentions) == [(0, 0, 1)]
    assert "malformed" in capsys.readouterr().err


def test_named_entities_without_proper_nouns_are_mentions():
    document = Document(
        [
            Sentence.from_words(
                ["the", "french", "left"],
                pos=["DT", "JJ", "VBD"],
                ner=["O", "NORP", "O"],
            )
        ]
    )
    mentions = MentionExtractor(warn=False)(document)
    assert spans(mentions) == [(0, 1, 2)]


def test_mentions_are_sorted_across_sentences():
    mentions = MentionExtractor(warn=False)(dan_ramage_document())
    orders = [m.doc_order() for m in mentions]
    assert orders == sorted(orders)
    assert [m.surface() for m in mentions] == [
        "Dan Ramage",
        "Microsoft",
        "He",
        "Seattle",
        "he",
        "Ed",
        "Seattle",
    ]
