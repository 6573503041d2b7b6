"""Final merge of validated items, plus the stage-progress reporter."""

import logging
from typing import Callable, Iterable, List, Optional, Union

from ..models import EvidenceItem

logger = logging.getLogger(__name__)

MAX_RESULTS = 10

STAGE_PREPARING = 1
STAGE_QUERYING = 2
STAGE_PROCESSING = 3
STAGE_VALIDATING = 4
STAGE_DONE = 5

STAGE_LABELS = {
    STAGE_PREPARING: "preparing",
    STAGE_QUERYING: "querying sources",
    STAGE_PROCESSING: "processing results",
    STAGE_VALIDATING: "validating",
    STAGE_DONE: "done",
}


class ProgressSink:
    """Receives stage notifications. Subclass and override on_stage."""

    def on_stage(self, stage: int, label: str) -> None:
        pass


SinkLike = Union[ProgressSink, Callable[[int, str], None]]


class ProgressReporter:
    """
    Forwards stage notifications to a sink.

    Stages are strictly increasing and each is delivered at most once.
    A sink that raises is logged and otherwise ignored.
    """

    def __init__(self, sink: Optional[SinkLike] = None):
        self.sink = sink
        self.last_stage = 0

    def stage(self, stage: int) -> None:
        if stage not in STAGE_LABELS:
            raise ValueError(f"Unknown progress stage: {stage}")
        if stage <= self.last_stage:
            logger.debug(f"Ignoring out-of-order progress stage {stage} (last {self.last_stage})")
            return
        self.last_stage = stage
        if self.sink is None:
            return

        label = STAGE_LABELS[stage]
        notify = getattr(self.sink, "on_stage", self.sink)
        try:
            notify(stage, label)
        except Exception as e:
            logger.warning(f"Progress sink failed on stage {stage}: {e}", exc_info=True)


def aggregate(
    text_items: Iterable[EvidenceItem],
    video_items: Iterable[EvidenceItem],
    max_items: int = MAX_RESULTS,
) -> List[EvidenceItem]:
    """Text-engine items first, then videos, order preserved, capped at max_items (never above MAX_RESULTS)."""
    limit = max(0, min(max_items, MAX_RESULTS))
    merged = list(text_items) + list(video_items)
    if len(merged) > limit:
        logger.info(f"Capping {len(merged)} items to {limit}")
    return merged[:limit]
