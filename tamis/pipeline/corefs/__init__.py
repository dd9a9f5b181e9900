from tamis.pipeline.corefs.mentions import Mention, MentionExtractor
from tamis.pipeline.corefs.features import FeatureExtractor
from tamis.pipeline.corefs.clusters import ClusterStore, ClusterAttributes
from tamis.pipeline.corefs.sieves import SIEVES, SIEVES_BY_NAME, Sieve, make_sieves
from tamis.pipeline.corefs.chains import Chain, ChainBuilder
from tamis.pipeline.corefs.resolver import Resolver
from tamis.pipeline.corefs.corefs import SieveCoreferenceResolver
