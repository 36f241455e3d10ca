"""Single-writer, many-reader holder for the active sampler."""

from __future__ import annotations

import threading

from remotesampler.samplers import DecisionSampler


class SamplerSlot:
    """
    Holds exactly one sampler.

    Readers call ``load()`` without locking: rebinding an attribute is atomic,
    and samplers are never mutated once stored, so a reader always sees one
    complete sampler. Writers are serialized by a lock.
    """

    def __init__(self, sampler: DecisionSampler) -> None:
        if sampler is None:
            raise ValueError("sampler slot cannot be empty")
        self._sampler = sampler
        self._generation = 0
        self._lock = threading.Lock()

    def load(self) -> DecisionSampler:
        return self._sampler

    def store(self, sampler: DecisionSampler) -> None:
        if sampler is None:
            raise ValueError("sampler slot cannot be empty")
        with self._lock:
            self._sampler = sampler
            self._generation += 1

    @property
    def generation(self) -> int:
        """Number of stores since construction."""
        return self._generation
