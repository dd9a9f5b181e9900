from typing import FrozenSet, List, Set, Tuple
import pytest
from tamis.pipeline.core import Document, Sentence
from tamis.pipeline.corefs import SIEVES, Resolver
from conftest import dan_ramage_document, make_document, your_mom_document

Span = Tuple[int, int, int]


def chains_spans(chains) -> Set[FrozenSet[Span]]:
    return {
        frozenset(m.doc_order() for m in chain.mentions) for chain in chains.values()
    }


def test_pronoun_resolves_to_person(resolver: Resolver):
    document = dan_ramage_document()
    resolver.resolve(document)

    ramage_id = document.token(0, 1).coref_cluster_id
    he_id = document.token(1, 0).coref_cluster_id
    ed_id = document.token(3, 0).coref_cluster_id
    assert not ramage_id is None
    assert ramage_id == he_id
    assert ramage_id == document.token(2, 3).coref_cluster_id
    assert not ed_id is None
    assert ed_id != ramage_id


def test_pronouns_and_locations_are_kept_apart(resolver: Resolver):
    document = your_mom_document()
    resolver.resolve(document)

    mom_id = document.token(0, 1).coref_cluster_id
    assert not mom_id is None
    assert document.token(0, 3).coref_cluster_id == mom_id
    assert document.token(1, 0).coref_cluster_id == mom_id

    denver_id = document.token(0, 6).coref_cluster_id
    assert not denver_id is None
    assert document.token(1, 5).coref_cluster_id == denver_id
    assert denver_id != mom_id


def test_chain_ids_match_mentions_cluster_ids(resolver: Resolver):
    for document in (dan_ramage_document(), your_mom_document()):
        chains = resolver.resolve(document)
        assert len(chains) > 0
        for chain_id, chain in chains.items():
            assert chain.id == chain_id
            assert chain_id == chain.representative().id
            for mention in chain.mentions:
                assert mention.cluster_id == chain_id
            assert chain.mentions == sorted(chain.mentions, key=lambda m: m.doc_order())


def test_every_mention_is_in_exactly_one_chain(resolver: Resolver):
    document = your_mom_document()
    chains = resolver.resolve(document)
    ids = [m.id for chain in chains.values() for m in chain.mentions]
    assert sorted(ids) == list(range(1, len(ids) + 1))


def clinton_document() -> Document:
    """Clinton won. Clinton, whose term ended, smiled."""
    return make_document(
        ("(ROOT (S (NP (NNP Clinton)) (VP (VBD won)) (. .)))", {0: "PERSON"}),
        (
            "(ROOT (S (NP (NP (NNP Clinton)) (, ,) (SBAR (WHNP (WP$ whose)) (S (NP (NN term)) (VP (VBD ended)))) (, ,)) (VP (VBD smiled)) (. .)))",
            {0: "PERSON"},
        ),
    )


def test_chains_respect_i_within_i(resolver: Resolver):
    for document in (dan_ramage_document(), your_mom_document(), clinton_document()):
        chains = resolver.resolve(document)
        for chain in chains.values():
            for m1 in chain.mentions:
                for m2 in chain.mentions:
                    assert not m1.id in m2.containers


def test_nested_mention_is_not_merged_through_its_cluster(resolver: Resolver):
    document = clinton_document()
    resolver.resolve(document)
    clinton_id = document.token(0, 0).coref_cluster_id
    assert document.token(1, 0).coref_cluster_id == clinton_id
    assert document.token(1, 2).coref_cluster_id == clinton_id
    # "," is only covered by "Clinton, whose term ended,"
    assert not document.token(1, 1).coref_cluster_id is None
    assert document.token(1, 1).coref_cluster_id != clinton_id


def test_resolution_is_deterministic(resolver: Resolver):
    chains1 = resolver.resolve(your_mom_document())
    chains2 = resolver.resolve(your_mom_document())
    assert chains1.keys() == chains2.keys()
    for chain_id in chains1.keys():
        assert [m.doc_order() for m in chains1[chain_id].mentions] == [
            m.doc_order() for m in chains2[chain_id].mentions
        ]


def test_resolving_twice_gives_the_same_annotations(resolver: Resolver):
    document = dan_ramage_document()
    resolver.resolve(document)
    first_ids = [token.coref_cluster_id for token in document.tokens()]
    resolver.resolve(document)
    assert first_ids == [token.coref_cluster_id for token in document.tokens()]


@pytest.mark.parametrize("make_doc", [dan_ramage_document, your_mom_document])
def test_clusters_only_grow_sieve_after_sieve(make_doc):
    names = [sieve.name for sieve in SIEVES]
    previous = None
    for sieves_nb in range(len(names) + 1):
        resolver = Resolver(sieves=names[:sieves_nb], warn=False)
        partition = chains_spans(resolver.resolve(make_doc()))
        if not previous is None:
            for cluster in previous:
                assert any(cluster.issubset(other) for other in partition)
        previous = partition


def test_empty_document_has_no_chains(resolver: Resolver):
    assert resolver.resolve(Document([])) == {}


def test_document_without_mentions_has_no_chains(resolver: Resolver):
    document = make_document(("(ROOT (S (VP (VB Run)) (. !)))", {}))
    assert resolver.resolve(document) == {}
    assert all(token.coref_cluster_id is None for token in document.tokens())


def test_singleton_mention_gets_its_own_chain(resolver: Resolver):
    document = make_document(
        ("(ROOT (S (NP (NNP Ed)) (VP (VBD left)) (. .)))", {0: "PERSON"})
    )
    chains = resolver.resolve(document)
    assert len(chains) == 1
    chain = list(chains.values())[0]
    assert len(chain) == 1
    assert chain.id >= 1
    assert document.token(0, 0).coref_cluster_id == chain.id
    assert document.token(0, 1).coref_cluster_id is None


def test_innermost_mention_annotates_tokens(resolver: Resolver):
    document = your_mom_document()
    chains = resolver.resolve(document)
    # "Your" is a mention inside "Your mom"
    your_id = document.token(0, 0).coref_cluster_id
    mom_id = document.token(0, 1).coref_cluster_id
    assert your_id != mom_id
    assert [m.tokens for m in chains[your_id].mentions][0] == ["Your"]


def test_reflexive_pronoun_binds_subject(resolver: Resolver):
    document = make_document(
        (
            "(ROOT (S (NP (NNP John)) (VP (VBD hurt) (NP (PRP himself))) (. .)))",
            {0: "PERSON"},
        )
    )
    resolver.resolve(document)
    assert document.token(0, 0).coref_cluster_id == document.token(0, 2).coref_cluster_id


def test_pronoun_is_not_bound_by_its_coargument(resolver: Resolver):
    document = make_document(
        (
            "(ROOT (S (NP (NNP John)) (VP (VBD saw) (NP (PRP him))) (. .)))",
            {0: "PERSON"},
        )
    )
    resolver.resolve(document)
    assert document.token(0, 0).coref_cluster_id != document.token(0, 2).coref_cluster_id


def test_pronoun_in_embedded_clause_binds_subject(resolver: Resolver):
    document = make_document(
        (
            "(ROOT (S (NP (NNP John)) (VP (VBD said) (SBAR (S (NP (PRP he)) (VP (VBD left))))) (. .)))",
            {0: "PERSON"},
        )
    )
    resolver.resolve(document)
    assert document.token(0, 0).coref_cluster_id == document.token(0, 2).coref_cluster_id


def test_pronoun_window_limits_antecedents():
    sentences = [
        ("(ROOT (S (NP (NNP John)) (VP (VBD left)) (. .)))", {0: "PERSON"})
    ] + [("(ROOT (S (NP (DT The) (NN city)) (VP (VBD slept)) (. .)))", {})] * 4
    sentences.append(("(ROOT (S (NP (PRP He)) (VP (VBD came)) (. .)))", {}))

    document = make_document(*sentences)
    Resolver(pronoun_window=3, warn=False).resolve(document)
    assert document.token(0, 0).coref_cluster_id != document.token(5, 0).coref_cluster_id

    document = make_document(*sentences)
    Resolver(pronoun_window=5, warn=False).resolve(document)
    assert document.token(0, 0).coref_cluster_id == document.token(5, 0).coref_cluster_id


def test_first_person_pronouns_of_the_same_speaker_are_linked():
    sentences: List[Sentence] = []
    sentences.append(
        Sentence.from_parse(
            "(ROOT (S (NP (PRP I)) (VP (VBD left)) (. .)))", speaker="Alice"
        )
    )
    for _ in range(4):
        sentences.append(
            Sentence.from_parse(
                "(ROOT (S (NP (PRP It)) (VP (VBD rained)) (. .)))", speaker="Bob"
            )
        )
    sentences.append(
        Sentence.from_parse(
            "(ROOT (S (NP (PRP I)) (VP (VBD came)) (. .)))", speaker="Alice"
        )
    )
    document = Document(sentences)
    Resolver(warn=False).resolve(document)
    assert document.token(0, 0).coref_cluster_id == document.token(5, 0).coref_cluster_id


def test_first_person_pronouns_of_different_speakers_are_not_linked(
    resolver: Resolver,
):
    document = Document(
        [
            Sentence.from_parse(
                "(ROOT (S (NP (PRP I)) (VP (VBD left)) (. .)))", speaker="Alice"
            ),
            Sentence.from_parse(
                "(ROOT (S (NP (PRP I)) (VP (VBD came)) (. .)))", speaker="Bob"
            ),
        ]
    )
    resolver.resolve(document)
    assert document.token(0, 0).coref_cluster_id != document.token(1, 0).coref_cluster_id


def test_sentences_without_parse_are_degraded(capsys):
    document = Document(
        [
            Sentence.from_words(
                ["Dan", "left", "."], pos=["NNP", "VBD", "."], ner=["PERSON", "O", "O"]
            ),
            Sentence.from_words(["He", "came", "."], pos=["PRP", "VBD", "."]),
        ]
    )
    chains = Resolver(warn=True).resolve(document)
    assert "[warning]" in capsys.readouterr().err
    assert len(chains) == 1
    assert document.token(0, 0).coref_cluster_id == document.token(1, 0).coref_cluster_id


def test_unknown_sieve_is_rejected():
    with pytest.raises(ValueError):
        Resolver(sieves=["exact_string_match", "unknown_sieve"], warn=False)


def test_sieves_keep_their_order():
    resolver = Resolver(sieves=["pronoun_match", "exact_string_match"], warn=False)
    assert resolver.sieve_names() == ["exact_string_match", "pronoun_match"]


def test_missing_resource_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        Resolver(male_path=str(tmp_path / "missing.txt"), warn=False)


def test_resolve_documents(resolver: Resolver):
    documents = [dan_ramage_document(), your_mom_document(), Document([])]
    all_chains = list(resolver.resolve_documents(documents, progress_report=None))
    assert len(all_chains) == 3
    assert all_chains[2] == {}
