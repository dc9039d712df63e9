"""
Preview the BBTXT sampling pipeline.

Builds the pipeline from a YAML config (or command line options), produces a
few batches and prints their shapes and box statistics. With --dump-dir every
produced crop is written as a PNG with its boxes drawn on it.

Usage:
    bbtxt-preview --config data.yaml --batches 4 --dump-dir runs/preview
    bbtxt-preview --source train.bbtxt --width 128 --height 128 --reference-size 40
"""
import argparse
from pathlib import Path

from .config import build_config, load_config
from .data import AnnotationStore, BatchAssembler, count_boxes
from .errors import BBTXTError
from .utils.general import colorstr, increment_path, init_seeds
from .utils.plots import SampleDumper


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Preview BBTXT training samples')

    # ===== Config =====
    parser.add_argument('--config', type=str, default='',
                        help='YAML config with a "data" section (command line options are ignored)')

    # ===== Data =====
    parser.add_argument('--source', type=str, default=None,
                        help='BBTXT annotation file')
    parser.add_argument('--image-root', type=str, default=None,
                        help='Directory relative image paths are resolved against')
    parser.add_argument('--height', type=int, default=None,
                        help='Network input height')
    parser.add_argument('--width', type=int, default=None,
                        help='Network input width')
    parser.add_argument('--reference-size', type=float, default=None,
                        help='Size the anchor box is scaled to in the network input')
    parser.add_argument('--batch-size', type=int, default=None,
                        help='Batch size (default: 1)')
    parser.add_argument('--max-boxes', type=int, default=None,
                        help='Maximum number of boxes per image (default: 20)')
    parser.add_argument('--shuffle', action='store_true', default=None,
                        help='Shuffle the dataset every epoch')
    parser.add_argument('--rgb', action='store_true', default=None,
                        help='Feed RGB instead of BGR channel order')
    parser.add_argument('--dtype', type=str, default=None, choices=['float32', 'float64'],
                        help='Numeric type of the produced data (default: float32)')

    # ===== Run =====
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed (overrides the config)')
    parser.add_argument('--batches', type=int, default=1,
                        help='Number of batches to produce (default: 1)')
    parser.add_argument('--dump-dir', type=str, default=None,
                        help='Write every produced crop into this directory')

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Preview entry point."""
    args = parse_args(argv)

    try:
        if args.config:
            config = load_config(args.config)
            if args.seed is not None:
                config['data']['seed'] = args.seed
            if args.dump_dir is not None:
                config['data']['dump_dir'] = args.dump_dir
        else:
            config = build_config(args)

        data = config['data']
        if data['seed'] is not None:
            init_seeds(data['seed'])

        store = AnnotationStore.from_file(data['source'], capacity=data['max_boxes_per_image'],
                                          image_root=data['image_root'], dtype=data['dtype'])

        dumper = None
        if data['dump_dir']:
            save_dir = increment_path(Path(data['dump_dir']))
            dumper = SampleDumper(save_dir)
            print(colorstr('bright_cyan', f'Dumping samples to {save_dir}'))

        assembler = BatchAssembler.from_config(config, store, on_sample=dumper)

        print(colorstr('bright_cyan', f"Input size: {data['width']}x{data['height']}, "
                                      f"reference size: {data['reference_size']}"))

        for i in range(args.batches):
            images, labels = assembler.next_batch()
            counts = [count_boxes(slot) for slot in labels.numpy()]
            print(f'Batch {i}: images {tuple(images.shape)} labels {tuple(labels.shape)} | '
                  f'boxes per image {counts} | '
                  f'pixel range [{images.min().item():.3f}, {images.max().item():.3f}]')

        print(colorstr('bright_green', f'Done. Epoch {assembler.cursor.epoch}, '
                                       f'position {assembler.cursor.position}/{len(store)}'))
    except (BBTXTError, FileNotFoundError) as e:
        print(colorstr('bright_red', f'Error: {e}'))
        return 1

    return 0


if __name__ == '__main__':
    raise SystemExit(main())
