from typing import Dict, Generator, Iterable, List, Literal, Optional
from tamis.pipeline.core import Document
from tamis.pipeline.progress import (
    NoopProgressReporter,
    ProgressReporter,
    get_progress_reporter,
    progress_,
)
from tamis.pipeline.corefs.chains import Chain, ChainBuilder
from tamis.pipeline.corefs.clusters import ClusterStore
from tamis.pipeline.corefs.features import FeatureExtractor
from tamis.pipeline.corefs.mentions import MentionExtractor
from tamis.pipeline.corefs.sieves import SieveContext, make_sieves
from tamis.resources.dictionaries import CorefDictionaries


class Resolver:
    """A deterministic, multi-sieve coreference resolver.

    A resolver is built once, and can then resolve any number of
    documents.  It only holds read-only configuration and resources:
    each call to :meth:`resolve` allocates its own state, so that
    independent documents can be resolved concurrently.

    >>> resolver = Resolver()
    >>> chains = resolver.resolve(document)
    """

    def __init__(
        self,
        sieves: Optional[Iterable[str]] = None,
        dictionaries: Optional[CorefDictionaries] = None,
        pronoun_window: int = 3,
        lang: str = "eng",
        warn: bool = True,
        **resource_paths: str,
    ):
        """
        :param sieves: names of the enabled sieves (see
            :data:`tamis.pipeline.corefs.sieves.SIEVES_BY_NAME`).  Sieves
            always run in their fixed order.  If ``None``, all sieves
            are enabled.
        :param dictionaries: lexical resources.  If ``None``, they are
            loaded using ``resource_paths``.
        :param pronoun_window: number of sentences before a pronoun
            where its antecedent is searched
        :param lang: ISO 639-3 language code
        :param warn: if ``True``, print warnings on stderr
        :param resource_paths: paths of resources, passed to
            :class:`.CorefDictionaries` (``male_path``,
            ``demonyms_path``...).

        :raise ValueError: if a sieve name is unknown, or if a
            resource can't be loaded
        """
        self.sieves = make_sieves(sieves)

        if pronoun_window < 0:
            raise ValueError(
                f"[error] pronoun window must be non-negative (got {pronoun_window})"
            )
        self.pronoun_window = pronoun_window

        if dictionaries is None:
            dictionaries = CorefDictionaries(**resource_paths, lang=lang)
        elif len(resource_paths) > 0:
            raise ValueError(
                "[error] resource paths can't be given together with dictionaries."
            )
        self.dictionaries = dictionaries

        self.lang = lang
        self.warn = warn

        self.mention_extractor = MentionExtractor(lang=lang, warn=warn)
        self.feature_extractor = FeatureExtractor(dictionaries, lang=lang)
        self.chain_builder = ChainBuilder()

    def sieve_names(self) -> List[str]:
        """Names of the enabled sieves, in application order"""
        return [sieve.name for sieve in self.sieves]

    def resolve(
        self,
        document: Document,
        progress_reporter: Optional[ProgressReporter] = None,
    ) -> Dict[int, Chain]:
        """Resolve coreference in ``document``.

        Tokens of ``document`` covered by a mention are annotated with
        the id of the chain of that mention (see
        :attr:`.Token.coref_cluster_id`).

        :param progress_reporter: if given, reports the progress of
            sieves, with the name of the current sieve as message.

        :return: a dict mapping each chain id to its chain.  The dict
            is empty if the document has no mentions.
        """
        progress_reporter = progress_reporter or NoopProgressReporter()

        trees = self.mention_extractor.usable_parses(document)
        mentions = self.mention_extractor(document, trees)
        if len(mentions) == 0:
            document.clear_corefs_()
            return {}

        self.feature_extractor(document, mentions, trees)

        clusters = ClusterStore(mentions)
        context = SieveContext(
            document,
            mentions,
            trees,
            clusters,
            self.dictionaries,
            pronoun_window=self.pronoun_window,
        )
        for sieve in progress_(progress_reporter, self.sieves):
            progress_reporter.update_message_(sieve.name)
            sieve(context)

        return self.chain_builder(document, clusters)

    def resolve_documents(
        self,
        documents: List[Document],
        progress_report: Optional[Literal["tqdm"]] = "tqdm",
    ) -> Generator[Dict[int, Chain], None, None]:
        """Resolve several documents, one after the other.

        :param progress_report: if ``tqdm``, report progress using
            tqdm, one document at a time, with the current sieve as
            postfix.  If ``None``, does not report progress.
        """
        progress_reporter = get_progress_reporter(progress_report, unit="doc")
        sieves_progress_reporter = progress_reporter.get_subreporter()
        for document in progress_(progress_reporter, documents):
            yield self.resolve(document, sieves_progress_reporter)
