from typing import Set
import os
import pytest
from tamis.pipeline.core import Pipeline, PipelineStep, Sentence
from tamis.pipeline.corefs import SieveCoreferenceResolver
from conftest import dan_ramage_document


def test_pipeline_is_valid():
    class TestPipelineStep1(PipelineStep):
        def needs(self) -> Set[str]:
            return set()

        def production(self) -> Set[str]:
            return {"info_1"}

    class TestPipelineStep2(PipelineStep):
        def needs(self) -> Set[str]:
            return {"info_1"}

        def production(self) -> Set[str]:
            return set()

    pipeline = Pipeline([TestPipelineStep1(), TestPipelineStep2()])

    assert pipeline.check_valid()[0]


def test_pipeline_is_invalid():
    class TestPipelineStep1(PipelineStep):
        def needs(self) -> Set[str]:
            return set()

        def production(self) -> Set[str]:
            return set()

    class TestPipelineStep2(PipelineStep):
        def needs(self) -> Set[str]:
            return {"info_1"}

        def production(self) -> Set[str]:
            return set()

    pipeline = Pipeline([TestPipelineStep1(), TestPipelineStep2()])

    assert not pipeline.check_valid()[0]


def test_coref_step_needs_a_document():
    pipeline = Pipeline([SieveCoreferenceResolver()], progress_report=None, warn=False)
    assert not pipeline.check_valid()[0]
    assert pipeline.check_valid("document")[0]
    with pytest.raises(ValueError):
        pipeline("Dan Ramage is working for Microsoft.")


def test_coref_step_runs_on_a_document():
    pipeline = Pipeline([SieveCoreferenceResolver()], progress_report=None, warn=False)
    out = pipeline(document=dan_ramage_document())

    assert not out.chains is None
    assert not out.corefs is None
    assert len(out.corefs) == len(out.chains)
    ramage_chain = out.get_chain(0, 1)
    assert not ramage_chain is None
    assert ramage_chain.id == out.get_chain(1, 0).id
    assert out.get_chain(0, 2) is None


def test_coref_step_rejects_unsupported_lang():
    pipeline = Pipeline(
        [SieveCoreferenceResolver()], lang="fra", progress_report=None, warn=False
    )
    with pytest.raises(ValueError):
        pipeline(document=dan_ramage_document())


@pytest.mark.skipif(os.getenv("TAMIS_TEST_ALL") != "1", reason="performance")
def test_coref_pipeline_runs():
    from tamis.pipeline.preconfigured import coref_pipeline

    pipeline = coref_pipeline(warn=False, progress_report=None)
    out = pipeline("Dan Ramage is working for Microsoft. He's in Seattle!")
    assert not out.chains is None


def test_sentence_tags_must_match_words():
    with pytest.raises(ValueError):
        Sentence.from_words(["He", "left"], pos=["PRP"])
    with pytest.raises(ValueError):
        Sentence.from_words(["He", "left"], ner=["O", "O", "O"])
    with pytest.raises(ValueError):
        Sentence.from_parse("(ROOT (S (NP (PRP He)) (VP (VBD left))))", ner=["O"])
    sentence = Sentence.from_words(["He", "left"], pos=["PRP", "VBD"])
    assert len(sentence) == 2
    assert sentence.tokens[1].ner == "O"
