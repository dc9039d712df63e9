"""
Epoch-wise iteration order over an AnnotationStore.
"""
from typing import Optional

import numpy as np

from .annotations import AnnotatedImage, AnnotationStore


class EpochCursor:
    """
    Walks over the store in a fixed or shuffled order.

    When the end of the order is reached the position wraps to 0 and, with
    shuffling enabled, a fresh uniform permutation is drawn. A cursor is
    owned by exactly one worker together with its random generator.

    Args:
        store: Dataset entries
        shuffle: Reshuffle on every wraparound (and once at construction)
        rng: numpy Generator used for shuffling
    """

    def __init__(self, store: AnnotationStore, shuffle: bool = False,
                 rng: Optional[np.random.Generator] = None):
        self.store = store
        self.shuffle = shuffle
        self.rng = rng if rng is not None else np.random.default_rng()

        self.order = np.arange(len(store))
        self.position = 0
        self.epoch = 0

        if self.shuffle:
            self._shuffle()

    def _shuffle(self):
        self.order = self.rng.permutation(len(self.store))

    def __len__(self) -> int:
        return len(self.order)

    def next_index(self) -> int:
        """Store index of the next entry; advances the cursor."""
        index = int(self.order[self.position])

        self.position += 1
        if self.position >= len(self.order):
            if self.shuffle:
                self._shuffle()
            self.position = 0
            self.epoch += 1

        return index

    def next(self) -> AnnotatedImage:
        return self.store[self.next_index()]

    def __iter__(self):
        return self

    def __next__(self) -> AnnotatedImage:
        return self.next()
