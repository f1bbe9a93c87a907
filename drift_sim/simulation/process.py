"""Common bookkeeping for stochastic discrete interaction processes."""

from __future__ import annotations

import logging
import math

import numpy as np

from .types import CarrierType, ForceCondition, InteractionOutcome, StepContext

logger = logging.getLogger(__name__)


class DiscreteProcess:
    """Base class for processes that trigger at a sampled point along a track.

    The remaining distance to the next interaction is kept in units of mean
    free paths. It is drawn as ``-ln(u)`` the first time a length is
    requested, reduced by every step taken, and cleared by
    :meth:`reset_interaction_lengths_left` so the next request draws afresh.
    """

    process_name = "DiscreteProcess"

    def __init__(self, rng: np.random.Generator | None = None):
        self.rng = rng if rng is not None else np.random.default_rng()
        self._lengths_left: float | None = None
        self._current_mfp = math.inf

    def applicable(self, carrier_type: CarrierType) -> bool:
        raise NotImplementedError

    def mean_free_path(self, step: StepContext) -> tuple[float, ForceCondition]:
        raise NotImplementedError

    def do_interaction(self, step: StepContext) -> InteractionOutcome:
        raise NotImplementedError

    @property
    def lengths_left(self) -> float | None:
        return self._lengths_left

    def start_tracking(self) -> None:
        self.reset_interaction_lengths_left()

    def reset_interaction_lengths_left(self) -> None:
        self._lengths_left = None

    def post_step_interaction_length(
        self, step: StepContext
    ) -> tuple[float, ForceCondition]:
        """Proposed distance to this process's next interaction."""

        mfp, condition = self.mean_free_path(step)
        self._current_mfp = mfp
        if condition is ForceCondition.FORCED:
            return math.inf, condition

        if self._lengths_left is None:
            # 1 - u lies in (0, 1], so the log is finite
            self._lengths_left = -math.log(1.0 - float(self.rng.random()))
        if not math.isfinite(mfp):
            return math.inf, condition
        return self._lengths_left * mfp, condition

    def consume_step(self, step_length: float) -> None:
        """Subtract a travelled distance from the remaining interaction lengths."""

        if self._lengths_left is None:
            return
        mfp = self._current_mfp
        if not math.isfinite(mfp) or mfp <= 0.0:
            return
        self._lengths_left = max(0.0, self._lengths_left - float(step_length) / mfp)
        logger.debug(
            "%s: %.4g interaction lengths left", self.process_name, self._lengths_left
        )
