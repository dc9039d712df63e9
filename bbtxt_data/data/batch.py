"""
Batch assembly for BBTXT training data.

Each sample goes through
    EpochCursor -> load_image -> CropSampler -> SampleNormalizer
and is written into a batch of
    images: [B, 3, height, width]
    labels: [B, C, 5]  rows [label, xmin, ymin, xmax, ymax], sentinel label -1
"""
from typing import Any, Callable, Dict, Optional, Tuple

import numpy as np
import torch
from torch.utils.data import IterableDataset, get_worker_info

from .annotations import AnnotationStore
from .crop import CropPlan, CropSampler
from .cursor import EpochCursor
from .image import denormalize_to_uint8, load_image
from .normalizer import SampleNormalizer

# (dataset index, resized uint8 crop, transformed [C, 5] labels)
SampleHook = Callable[[int, np.ndarray, np.ndarray], None]


class BatchAssembler:
    """
    Produces training batches from an AnnotationStore.

    One assembler owns one cursor and one random generator, used for both
    shuffling and crop sampling, so a fixed seed reproduces the exact sample
    sequence. Workers sharing a store must each build their own assembler.

    Args:
        store: Parsed annotations (shared, read only)
        width: Network input width
        height: Network input height
        reference_size: Output size of the anchor box's larger side
        batch_size: Samples per batch
        shuffle: Reshuffle the dataset every epoch
        seed: Seed of the random generator (None draws fresh entropy)
        dtype: Numeric type of the produced data
        to_rgb: Feed RGB instead of OpenCV's BGR channel order
        on_sample: Optional diagnostic hook called for every produced sample
        rng: Use this generator instead of creating one from seed
    """

    def __init__(self, store: AnnotationStore, width: int, height: int, reference_size: float,
                 batch_size: int = 1, shuffle: bool = False, seed: Optional[int] = None,
                 dtype=np.float32, to_rgb: bool = False, on_sample: Optional[SampleHook] = None,
                 rng: Optional[np.random.Generator] = None):
        self.store = store
        self.width = width
        self.height = height
        self.batch_size = batch_size
        self.dtype = np.dtype(dtype)
        self.to_rgb = to_rgb
        self.on_sample = on_sample

        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.cursor = EpochCursor(store, shuffle=shuffle, rng=self.rng)
        self.sampler = CropSampler(width, height, reference_size, rng=self.rng)
        self.normalizer = SampleNormalizer(width, height, dtype=self.dtype)

    @classmethod
    def from_config(cls, config: Dict[str, Any], store: AnnotationStore,
                    on_sample: Optional[SampleHook] = None,
                    rng: Optional[np.random.Generator] = None) -> 'BatchAssembler':
        data = config['data']
        return cls(store, data['width'], data['height'], data['reference_size'],
                   batch_size=data['batch_size'], shuffle=data['shuffle'], seed=data['seed'],
                   dtype=data['dtype'], to_rgb=data['to_rgb'], on_sample=on_sample, rng=rng)

    @property
    def capacity(self) -> int:
        return self.store.capacity

    def load_sample(self, index: int) -> Tuple[np.ndarray, np.ndarray, CropPlan]:
        """
        Run the full pipeline for one store entry.

        Returns:
            data: [3, height, width] normalized pixels
            labels: [C, 5] labels in output pixel space
            plan: The crop that was applied
        """
        entry = self.store[index]
        image = load_image(entry.path, to_rgb=self.to_rgb, index=index)
        if image.ndim != 3 or image.shape[2] != 3:
            raise ValueError(f"Image must have 3 color channels: '{entry.path}'")

        # The stored annotation must not change, cropping rewrites the coordinates
        labels = entry.labels.astype(self.dtype, copy=True)

        plan = self.sampler.sample(image, labels)
        data, labels = self.normalizer.apply(image, labels, plan)

        if self.on_sample is not None:
            # The normalization is exactly invertible for uint8 input
            self.on_sample(index, denormalize_to_uint8(data), labels)

        return data, labels, plan

    def next_sample(self) -> Tuple[np.ndarray, np.ndarray, CropPlan]:
        return self.load_sample(self.cursor.next_index())

    def next_batch(self) -> Tuple[torch.Tensor, torch.Tensor]:
        """
        Returns:
            images: [batch_size, 3, height, width] tensor
            labels: [batch_size, C, 5] tensor
        """
        images = np.empty((self.batch_size, 3, self.height, self.width), dtype=self.dtype)
        labels = np.zeros((self.batch_size, self.capacity, 5), dtype=self.dtype)

        for b in range(self.batch_size):
            data, sample_labels, _ = self.next_sample()
            images[b] = data
            labels[b] = sample_labels

        return torch.from_numpy(images), torch.from_numpy(labels)

    def __iter__(self):
        return self

    def __next__(self) -> Tuple[torch.Tensor, torch.Tensor]:
        return self.next_batch()


class BBTXTIterableDataset(IterableDataset):
    """
    The sampling pipeline as a torch IterableDataset.

    All DataLoader workers replay the same epoch order, an EpochCursor seeded
    from (seed, epoch), and worker k takes every num_workers-th index starting
    at k, so one pass visits each entry exactly once when `num_samples`
    equals the dataset size (the default). Crop sampling uses a per-worker
    generator seeded from (seed, epoch, worker id). The store is shared read
    only. Call set_epoch() before each pass when using worker processes;
    in-process iteration advances the epoch by itself.
    """

    def __init__(self, store: AnnotationStore, width: int, height: int, reference_size: float,
                 shuffle: bool = False, seed: Optional[int] = None, dtype=np.float32,
                 to_rgb: bool = False, num_samples: Optional[int] = None):
        super().__init__()
        self.store = store
        self.width = width
        self.height = height
        self.reference_size = reference_size
        self.shuffle = shuffle
        # Drawn here, in the main process, so every worker agrees on the epoch order
        self.seed = seed if seed is not None else int(np.random.SeedSequence().entropy)
        self.dtype = dtype
        self.to_rgb = to_rgb
        self.num_samples = num_samples if num_samples is not None else len(store)
        self.epoch = 0

    @classmethod
    def from_config(cls, config: Dict[str, Any], store: AnnotationStore,
                    num_samples: Optional[int] = None) -> 'BBTXTIterableDataset':
        data = config['data']
        return cls(store, data['width'], data['height'], data['reference_size'],
                   shuffle=data['shuffle'], seed=data['seed'], dtype=data['dtype'],
                   to_rgb=data['to_rgb'], num_samples=num_samples)

    def set_epoch(self, epoch: int):
        self.epoch = epoch

    def __len__(self) -> int:
        return self.num_samples

    def epoch_order(self) -> np.ndarray:
        """Store indices of the current pass, identical in every worker."""
        rng = np.random.default_rng(np.random.SeedSequence([self.seed, self.epoch]))
        cursor = EpochCursor(self.store, shuffle=self.shuffle, rng=rng)
        return np.array([cursor.next_index() for _ in range(self.num_samples)], dtype=np.int64)

    def _worker_rng(self, worker_id: int) -> np.random.Generator:
        return np.random.default_rng(np.random.SeedSequence([self.seed, self.epoch, worker_id]))

    def __iter__(self):
        worker = get_worker_info()
        worker_id = worker.id if worker is not None else 0
        num_workers = worker.num_workers if worker is not None else 1

        indices = self.epoch_order()[worker_id::num_workers]
        # The order comes from epoch_order, the assembler only samples crops
        assembler = BatchAssembler(self.store, self.width, self.height, self.reference_size,
                                   dtype=self.dtype, to_rgb=self.to_rgb,
                                   rng=self._worker_rng(worker_id))
        self.epoch += 1

        for index in indices:
            data, labels, _ = assembler.load_sample(int(index))
            yield torch.from_numpy(data), torch.from_numpy(labels)


def collate_fn(batch):
    """
    Stack (image, labels) samples into batch tensors.

    Returns:
        images: [B, 3, H, W] tensor
        labels: [B, C, 5] tensor
    """
    images, labels = zip(*batch)
    return torch.stack(images, dim=0), torch.stack(labels, dim=0)

