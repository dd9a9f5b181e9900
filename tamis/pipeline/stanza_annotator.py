from __future__ import annotations
from typing import Any, Dict, List, Optional, Set, TYPE_CHECKING
import sys
from nltk import Tree
from tamis.attributes import strip_bio_prefix
from tamis.pipeline.core import Document, PipelineStep, Sentence, Token
from tamis.pipeline.progress import ProgressReporter

if TYPE_CHECKING:
    import stanza

#: ISO 639-3 => stanza language code
STANZA_LANGS = {"eng": "en"}


def stanza_sentence_tokens(sentence) -> List[Token]:
    """Convert the words of a stanza sentence to :class:`.Token`.

    Stanza NER tags are attached to tokens, which can be made of
    several words: each word receives the tag of its token.  BIOES
    prefixes are removed (``S-PERSON`` => ``PERSON``).
    """
    tokens = []
    for stanza_token in sentence.tokens:
        ner = strip_bio_prefix(stanza_token.ner or "O")
        for word in stanza_token.words:
            tokens.append(Token(word.text, word.xpos, ner, word.lemma))
    return tokens


class StanzaAnnotator(PipelineStep):
    """Annotate a raw text with the stanza library (tokenization,
    part-of-speech tagging, lemmatization, NER and constituency
    parsing), producing the :class:`.Document` needed by
    :class:`.SieveCoreferenceResolver`.

    .. note::

        This step requires the ``stanza`` library.  You can install
        it with ``pip install tamis[stanza]``.  Stanza models are
        downloaded on first use.
    """

    def __init__(
        self,
        stanza_pipeline: Optional[stanza.Pipeline] = None,
        **stanza_kwargs,
    ) -> None:
        """
        :param stanza_pipeline: an already loaded stanza pipeline.  It
            must include the ``tokenize``, ``pos``, ``lemma``, ``ner``
            and ``constituency`` processors.
        :param stanza_kwargs: extra args for :class:`stanza.Pipeline`,
            when ``stanza_pipeline`` is not given.
        """
        self.stanza_pipeline = stanza_pipeline
        self.stanza_kwargs = stanza_kwargs
        super().__init__()

    def _pipeline_init_(
        self, lang: str, progress_reporter: ProgressReporter, **kwargs
    ):
        super()._pipeline_init_(lang, progress_reporter, **kwargs)
        self.warn = kwargs.get("warn", True)
        if self.stanza_pipeline is None:
            import stanza

            self.stanza_pipeline = stanza.Pipeline(
                lang=STANZA_LANGS[lang],
                processors="tokenize,pos,lemma,ner,constituency",
                **self.stanza_kwargs,
            )

    def __call__(self, text: str, **kwargs) -> Dict[str, Any]:
        assert not self.stanza_pipeline is None
        stanza_doc = self.stanza_pipeline(text)

        sentences = []
        for sent_i, stanza_sentence in enumerate(
            self._progress_(stanza_doc.sentences)
        ):
            tokens = stanza_sentence_tokens(stanza_sentence)
            parse = None
            if not getattr(stanza_sentence, "constituency", None) is None:
                try:
                    parse = Tree.fromstring(str(stanza_sentence.constituency))
                except ValueError as e:
                    if self.warn:
                        print(
                            f"[warning] could not read the parse of sentence {sent_i}: {e}",
                            file=sys.stderr,
                        )
            sentences.append(Sentence(tokens, parse))

        return {"document": Document(sentences)}

    def needs(self) -> Set[str]:
        return {"text"}

    def production(self) -> Set[str]:
        return {"document"}

    def supported_langs(self) -> Set[str]:
        return set(STANZA_LANGS.keys())
