from __future__ import annotations
from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    Generator,
    Literal,
    Iterable,
    Tuple,
    Set,
    List,
    Optional,
    Union,
    TypeVar,
    TYPE_CHECKING,
)
import sys

from nltk import Tree

from tamis.pipeline.progress import ProgressReporter, get_progress_reporter, progress_
from tamis.trees import parse_tree, preterminal_positions

if TYPE_CHECKING:
    from tamis.pipeline.corefs.chains import Chain
    from tamis.pipeline.corefs.mentions import Mention


@dataclass
class Token:
    """An annotated token, as produced by upstream annotators"""

    text: str
    #: part-of-speech tag, in the Penn Treebank tagset
    pos: Optional[str] = None
    #: named entity tag (``PERSON``, ``ORGANIZATION``...), or ``O``
    ner: str = "O"
    lemma: Optional[str] = None
    speaker: Optional[str] = None
    #: id of the coreference chain of the innermost mention covering
    #: this token.  Set by coreference resolution.
    coref_cluster_id: Optional[int] = None


@dataclass
class Sentence:
    tokens: List[Token]
    #: constituency parse.  Its leaves must correspond to ``tokens``.
    parse: Optional[Tree] = None
    speaker: Optional[str] = None

    @staticmethod
    def from_parse(
        parse: Union[str, Tree],
        ner: Optional[List[str]] = None,
        lemmas: Optional[List[str]] = None,
        speaker: Optional[str] = None,
    ) -> Sentence:
        """Create a sentence from a PTB bracketed parse.  Tokens and
        their part-of-speech tags are read from the tree preterminals.

        :param parse: a bracketed string such as ``(ROOT (S (NP (PRP
            He)) (VP (VBD left))))``, or an :class:`nltk.Tree`
        :param ner: a NER tag for each token.  Defaults to ``O``.
        :param lemmas: a lemma for each token
        :param speaker: speaker of the sentence, if known
        """
        tree = parse_tree(parse)
        words = tree.leaves()
        pos_tags = [tree[p].label() for p in preterminal_positions(tree)]
        ner = ner or ["O"] * len(words)
        if len(ner) != len(words):
            raise ValueError(
                f"[error] {len(ner)} NER tags given for a sentence of {len(words)} tokens."
            )
        lemmas = lemmas or [None] * len(words)  # type: ignore
        tokens = [
            Token(word, pos, tag, lemma)
            for word, pos, tag, lemma in zip(words, pos_tags, ner, lemmas)  # type: ignore
        ]
        return Sentence(tokens, tree, speaker)

    @staticmethod
    def from_words(
        words: List[str],
        pos: Optional[List[str]] = None,
        ner: Optional[List[str]] = None,
        speaker: Optional[str] = None,
    ) -> Sentence:
        """Create a sentence without a parse

        :raise ValueError: if ``pos`` or ``ner`` do not have one tag
            per word
        """
        pos = pos or [None] * len(words)  # type: ignore
        ner = ner or ["O"] * len(words)
        for tags_name, tags in (("POS", pos), ("NER", ner)):
            if len(tags) != len(words):  # type: ignore
                raise ValueError(
                    f"[error] {len(tags)} {tags_name} tags given for a sentence of {len(words)} tokens."  # type: ignore
                )
        return Sentence(
            [Token(word, p, tag) for word, p, tag in zip(words, pos, ner)],  # type: ignore
            None,
            speaker,
        )

    def words(self) -> List[str]:
        return [token.text for token in self.tokens]

    def __len__(self) -> int:
        return len(self.tokens)


@dataclass
class Document:
    """A pre-annotated document, split into sentences"""

    sentences: List[Sentence] = field(default_factory=list)

    def tokens(self) -> Generator[Token, None, None]:
        for sentence in self.sentences:
            for token in sentence.tokens:
                yield token

    def token(self, sent_idx: int, token_idx: int) -> Token:
        return self.sentences[sent_idx].tokens[token_idx]

    def clear_corefs_(self):
        """Remove coreference annotations from all tokens"""
        for token in self.tokens():
            token.coref_cluster_id = None


class PipelineStep:
    """An abstract pipeline step

    .. note::

        The ``__call__``, ``needs`` and ``production`` methods _must_ be
        overridden by derived classes.

    .. note::

        The ``optional_needs`` and ``supported_langs`` methods can be
        overridden by derived classes.
    """

    def __init__(self):
        """Initialize the :class:`PipelineStep` with a given configuration."""
        pass

    def _pipeline_init_(
        self, lang: str, progress_reporter: ProgressReporter, **kwargs
    ) -> Optional[Dict[Pipeline.PipelineParameter, Any]]:
        """Set the step configuration that is common to the whole
        pipeline.

        :param lang: the lang of the whole pipeline
        :param progress_reporter:
        :param kwargs: additional pipeline parameters.

        :return: a step can return a dictionary of pipeline params if
                 it wish to modify some of these.
        """
        supported_langs = self.supported_langs()
        if not supported_langs == "any" and not lang in supported_langs:
            raise ValueError(
                f"[error] {self.__class__} does not support lang {lang} (supported language: {supported_langs})."
            )
        self.lang = lang

        self.progress_reporter = progress_reporter

    T = TypeVar("T")

    def _progress_(
        self, it: Iterable[T], total: Optional[int] = None
    ) -> Generator[T, None, None]:
        for elt in progress_(self.progress_reporter, it, total):
            yield elt

    def __call__(self, **kwargs) -> Dict[str, Any]:
        raise NotImplementedError()

    def supported_langs(self) -> Union[Set[str], Literal["any"]]:
        """
        :return: a list of supported languages, as ISO 639-3 codes, or
                 the string ``'any'``
        """
        return {"eng"}

    def needs(self) -> Set[str]:
        """
        :return: a `set` of state attributes needed by this
            :class:`PipelineStep`. This method must be overriden
            by derived classes.
        """
        raise NotImplementedError()

    def optional_needs(self) -> Set[str]:
        """
        :return: a `set` of state attributes optionally neeeded by this
            :class:`PipelineStep`. This method can be overriden by derived
            classes.
        """
        return set()

    def production(self) -> Set[str]:
        """
        :return: a `set` of state attributes produced by this
            :class:`PipelineStep`. This method must be overriden
            by derived classes.
        """
        raise NotImplementedError()


@dataclass
class PipelineState:
    """The state of a pipeline, annotated in a :class:`Pipeline` lifetime"""

    #: input text
    text: Optional[str]

    #: annotated document.  After coreference resolution, tokens
    #: carry their chain id.
    document: Optional[Document] = None

    #: coreference chains, by chain id
    chains: Optional[Dict[int, Chain]] = None

    #: coreference chains, as lists of mentions in document order
    corefs: Optional[List[List[Mention]]] = None

    def get_chain(self, sent_idx: int, token_idx: int) -> Optional[Chain]:
        """Get the coreference chain covering the given token.

        :return: a :class:`.Chain`, or ``None`` if the token is not
                 part of any mention.
        """
        assert not self.document is None
        assert not self.chains is None
        chain_id = self.document.token(sent_idx, token_idx).coref_cluster_id
        if chain_id is None:
            return None
        return self.chains[chain_id]


class Pipeline:
    """A flexible NLP pipeline"""

    #: all the possible parameters of the whole pipeline, that are
    #: shared between steps
    PipelineParameter = Literal["lang", "progress_reporter", "warn"]

    def __init__(
        self,
        steps: List[PipelineStep],
        lang: str = "eng",
        progress_report: Optional[Literal["tqdm"]] = "tqdm",
        warn: bool = True,
    ) -> None:
        """
        :param steps: a ``list`` of :class:``PipelineStep``, that
            will be executed in order
        :param progress_report: if ``tqdm``, report the pipeline
            progress using tqdm.  if ``None``, does not report
            progress.
        :param lang: ISO 639-3 language code
        :param warn: if ``True``, print warnings on stderr
        """
        self.steps = steps

        self.progress_report: Optional[Literal["tqdm"]] = progress_report
        self.progress_reporter = get_progress_reporter(progress_report)

        self.lang = lang
        self.warn = warn

    def _pipeline_init_steps_(self, ignored_steps: Optional[List[str]] = None):
        """Initialise steps with global pipeline parameters.

        :param ignored_steps: a list of steps production.  All steps
            with a production in ``ignored_steps`` will be ignored.
        """
        steps_progress_reporter = self.progress_reporter.get_subreporter()
        steps = self._non_ignored_steps(ignored_steps)
        pipeline_params = {
            "progress_reporter": steps_progress_reporter,
            "warn": self.warn,
        }
        for step in steps:
            step_additional_params = step._pipeline_init_(self.lang, **pipeline_params)
            if not step_additional_params is None:
                for key, value in step_additional_params.items():
                    setattr(self, key, value)
                    pipeline_params[key] = value

    def _non_ignored_steps(
        self, ignored_steps: Optional[List[str]]
    ) -> List[PipelineStep]:
        if ignored_steps is None:
            return self.steps
        return [
            s
            for s in self.steps
            if not any([p in s.production() for p in ignored_steps])
        ]

    def check_valid(
        self, *args, ignored_steps: Optional[List[str]] = None
    ) -> Tuple[bool, List[str]]:
        """Check that the current pipeline can be run, which is
        possible if all steps needs are satisfied

        :param args: list of additional attributes to add to the
            starting pipeline state.
        :param ignored_steps: a list of steps production.  All steps
            with a production in ``ignored_steps`` will be ignored.

        :return: a tuple : ``(True, [warnings])`` if the pipeline is
                 valid, ``(False, [errors])`` otherwise
        """
        pipeline_state = set(args).union({"text"})
        warnings = []

        for i, step in enumerate(self._non_ignored_steps(ignored_steps)):
            if not step.needs().issubset(pipeline_state):
                return (
                    False,
                    [
                        f"step {i + 1} ({step.__class__.__name__}) has unsatisfied needs. "
                        + f"needs: {step.needs()}. "
                        + f"available: {pipeline_state}. "
                        + f"missing: {step.needs() - pipeline_state}."
                    ],
                )

            if not step.optional_needs().issubset(pipeline_state):
                warnings.append(
                    f"step {i + 1} ({step.__class__.__name__}) has unsatisfied optional needs. "
                    + f"needs: {step.optional_needs()}. "
                    + f"available: {pipeline_state}. "
                    + f"missing: {step.optional_needs() - pipeline_state}."
                )

            pipeline_state = pipeline_state.union(step.production())

        return (True, warnings)

    def __call__(
        self,
        text: Optional[str] = None,
        ignored_steps: Optional[List[str]] = None,
        **kwargs,
    ) -> PipelineState:
        """Run the pipeline sequentially.

        :param text: input text.  Can be ``None`` when a
            ``document`` is given directly as a keyword argument.
        :param ignored_steps: a list of steps production.  All steps
            with a production in ``ignored_steps`` will be ignored.

        :return: the output of the last step of the pipeline
        """
        is_valid, warnings_or_errors = self.check_valid(
            *kwargs.keys(), ignored_steps=ignored_steps
        )
        if not is_valid:
            raise ValueError(warnings_or_errors)
        if self.warn:
            for warning in warnings_or_errors:
                print(f"[warning] : {warning}", file=sys.stderr)

        self._pipeline_init_steps_(ignored_steps)

        state = PipelineState(text)
        for key, value in kwargs.items():
            setattr(state, key, value)

        steps = self._non_ignored_steps(ignored_steps)

        for step in progress_(self.progress_reporter, steps):
            self.progress_reporter.update_message_(f"{step.__class__.__name__}")

            out = step(**state.__dict__)
            for key, value in out.items():
                setattr(state, key, value)

        return state
