"""Progress reporting.

A reporter follows one iteration (the steps of a pipeline, or a batch
of documents).  Nested iterations (the sieves run on a document) are
followed by a subreporter, obtained with
:meth:`ProgressReporter.get_subreporter`.
"""
from __future__ import annotations
from typing import Iterable, Literal, Optional, TypeVar, Generator
import sys
from tqdm import tqdm


class ProgressReporter:
    """Base class of progress reporters.  It only keeps count of the
    progress: derived classes display it."""

    def __init__(self) -> None:
        self.total = 0
        self.progress = 0

    def start_(self, total: int):
        self.total = total
        self.progress = 0

    def update_progress_(self, added_progress: int):
        self.progress += added_progress

    def update_message_(self, message: str):
        pass

    def end_(self):
        pass

    def get_subreporter(self) -> ProgressReporter:
        return NoopProgressReporter()


class NoopProgressReporter(ProgressReporter):
    pass


class TQDMProgressReporter(ProgressReporter):
    """Display progress with a tqdm bar.  The progress of a nested
    iteration is displayed as a postfix of the bar."""

    def __init__(self, unit: str = "it") -> None:
        super().__init__()
        self.unit = unit
        self.tqdm: Optional[tqdm] = None

    def start_(self, total: int):
        super().start_(total)
        self.tqdm = tqdm(total=total, unit=self.unit)

    def update_progress_(self, added_progress: int):
        super().update_progress_(added_progress)
        assert not self.tqdm is None
        self.tqdm.update(added_progress)

    def update_message_(self, message: str):
        assert not self.tqdm is None
        self.tqdm.set_description_str(message)

    def end_(self):
        if not self.tqdm is None:
            self.tqdm.close()

    def get_subreporter(self) -> ProgressReporter:
        return TQDMSubProgressReporter(self)


class TQDMSubProgressReporter(ProgressReporter):
    def __init__(self, parent: TQDMProgressReporter) -> None:
        super().__init__()
        self.parent = parent
        self.message = ""

    def _display_(self):
        if self.parent.tqdm is None:
            return
        self.parent.tqdm.set_postfix(
            sub=f"{self.message} ({self.progress}/{self.total})".strip()
        )

    def update_progress_(self, added_progress: int):
        super().update_progress_(added_progress)
        self._display_()

    def update_message_(self, message: str):
        self.message = message
        self._display_()


T = TypeVar("T")


def progress_(
    progress_reporter: ProgressReporter,
    it: Iterable[T],
    total: Optional[int] = None,
) -> Generator[T, None, None]:
    """Iterate over ``it``, reporting progress with ``progress_reporter``.

    :param total: number of elements of ``it``.  When ``None``,
        ``len(it)`` is used.
    """
    if total is None:
        total = len(it)  # type: ignore
    progress_reporter.start_(total)
    for elt in it:
        yield elt
        progress_reporter.update_progress_(1)
    progress_reporter.end_()


def get_progress_reporter(
    name: Optional[Literal["tqdm"]], unit: str = "it"
) -> ProgressReporter:
    """
    :param name: ``'tqdm'``, or ``None`` to not report progress
    :param unit: unit of the reported iteration (``'doc'``...)
    """
    if name is None:
        return NoopProgressReporter()
    if name == "tqdm":
        return TQDMProgressReporter(unit=unit)
    print(f"[warning] unknown progress reporter: {name}", file=sys.stderr)
    return NoopProgressReporter()
