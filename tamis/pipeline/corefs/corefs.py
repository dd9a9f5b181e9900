from __future__ import annotations
from typing import Any, Dict, Iterable, Literal, Optional, Set, Union
from tamis.pipeline.core import Document, PipelineStep
from tamis.pipeline.progress import ProgressReporter
from tamis.pipeline.corefs.resolver import Resolver
from tamis.resources.dictionaries import CorefDictionaries


class SieveCoreferenceResolver(PipelineStep):
    """A deterministic coreference resolver, using a sequence of
    sieves of decreasing precision.  Based on 'Deterministic
    Coreference Resolution Based on Entity-Centric, Precision-Ranked
    Rules' (Lee et al.  2013).
    """

    def __init__(
        self,
        sieves: Optional[Iterable[str]] = None,
        dictionaries: Optional[CorefDictionaries] = None,
        pronoun_window: int = 3,
        **resource_paths: str,
    ) -> None:
        """
        :param sieves: names of the enabled sieves.  If ``None``, all
            sieves are enabled.
        :param dictionaries: lexical resources.  If ``None``, they
            are loaded from ``resource_paths`` when the pipeline is
            initialized.
        :param pronoun_window: number of sentences before a pronoun
            where its antecedent is searched
        :param resource_paths: see :class:`.CorefDictionaries`
        """
        self.sieves = None if sieves is None else list(sieves)
        self.dictionaries = dictionaries
        self.pronoun_window = pronoun_window
        self.resource_paths = resource_paths
        self.resolver: Optional[Resolver] = None
        super().__init__()

    def _pipeline_init_(
        self, lang: str, progress_reporter: ProgressReporter, **kwargs
    ):
        super()._pipeline_init_(lang, progress_reporter, **kwargs)
        self.resolver = Resolver(
            sieves=self.sieves,
            dictionaries=self.dictionaries,
            pronoun_window=self.pronoun_window,
            lang=lang,
            warn=kwargs.get("warn", True),
            **self.resource_paths,
        )
        # resources are loaded once
        self.dictionaries = self.resolver.dictionaries
        self.resource_paths = {}

    def __call__(self, document: Document, **kwargs) -> Dict[str, Any]:
        assert not self.resolver is None
        chains = self.resolver.resolve(document, self.progress_reporter)
        corefs = [
            chain.mentions for _, chain in sorted(chains.items(), key=lambda kv: kv[0])
        ]
        return {"chains": chains, "corefs": corefs}

    def needs(self) -> Set[str]:
        return {"document"}

    def production(self) -> Set[str]:
        return {"chains", "corefs"}

    def supported_langs(self) -> Union[Set[str], Literal["any"]]:
        return {"eng"}
