from __future__ import annotations
import logging
from typing import Optional, Union

import numpy as np

from .model.contract import ModelContract
from .model.runtime import ModelRuntime
from .reduce import flatten_scores
from .results import ModelUnavailable, RuntimeFailure

LOGGER = logging.getLogger(__name__)

class Invoker:
    """Submit an assembled tensor to the runtime and adapt the output rank.

    No retries and no timeouts: a failing call returns RuntimeFailure and the next
    call starts fresh.
    """

    def __init__(self, runtime: Optional[ModelRuntime], contract: ModelContract):
        self.runtime = runtime
        self.contract = contract

    @property
    def available(self) -> bool:
        return self.runtime is not None

    def infer(self, tensor: np.ndarray) -> Union[np.ndarray, ModelUnavailable, RuntimeFailure]:
        """Per-class scores as a 1-D array, or the failure value for this call."""
        if self.runtime is None:
            return ModelUnavailable()
        try:
            out = self.runtime.run(tensor)
        except Exception as e:
            LOGGER.error("inference failed for input %s: %s", list(tensor.shape), e)
            return RuntimeFailure(cause=str(e), error_type=type(e).__name__)
        out = np.asarray(out, dtype=np.float32)
        if out.ndim == 0:
            return RuntimeFailure(cause="model returned a scalar output", error_type="ValueError")
        scores = flatten_scores(out)
        expected = self.contract.output_size
        if expected is not None and scores.size != expected:
            LOGGER.warning("model returned %d scores, declared output size is %d", scores.size, expected)
        return scores

    def close(self) -> None:
        if self.runtime is not None:
            self.runtime.close()
            self.runtime = None
