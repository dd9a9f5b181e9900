from tamis.pipeline.core import (
    Token,
    Sentence,
    Document,
    PipelineStep,
    PipelineState,
    Pipeline,
)
from tamis.pipeline.progress import ProgressReporter
