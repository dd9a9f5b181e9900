from typing import Optional
from tamis.pipeline.core import Pipeline


def coref_pipeline(
    annotator_kwargs: Optional[dict] = None,
    resolver_kwargs: Optional[dict] = None,
    **pipeline_kwargs,
) -> Pipeline:
    """Return a pre-configured coreference pipeline: annotation of a
    raw text with stanza, then sieve-based coreference resolution.

    :param annotator_kwargs: kwargs for :class:`.StanzaAnnotator`
    :param resolver_kwargs: kwargs for :class:`.SieveCoreferenceResolver`
    :param pipeline_kwargs: kwargs for :class:`.Pipeline`
    """
    from tamis.pipeline.stanza_annotator import StanzaAnnotator
    from tamis.pipeline.corefs import SieveCoreferenceResolver

    annotator_kwargs = annotator_kwargs or {}
    resolver_kwargs = resolver_kwargs or {}

    return Pipeline(
        [
            StanzaAnnotator(**annotator_kwargs),
            SieveCoreferenceResolver(**resolver_kwargs),
        ],
        **pipeline_kwargs,
    )
