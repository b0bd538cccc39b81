"""
Batch driver: enhance every supported image in a directory.

Each file is decoded, run through the enhancement pipeline and written under
the same name into the output directory. Images are independent, so they are
fanned out over a process pool; a file that fails at any step is reported
and the batch moves on.
"""

from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field, asdict
from functools import partial
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import argparse
import logging
import math
import os
import sys
import time

from .io import DecodeError, EncodeError, JPEG_QUALITY, read_image, save_image
from .metrics import compute_metrics
from .pipeline import DEFAULT_RECIPE, EnhancementRecipe, enhance_image
from .report import create_batch_visualizations, generate_report


logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp'}

DEFAULT_CONFIG = {
    'input_dir': 'images',
    'output_dir': 'output',
    'workers': None,  # None = one per CPU
    'jpeg_quality': JPEG_QUALITY,
    'report': True,
    'charts': False,
}

EXIT_OK = 0
EXIT_NO_INPUT = 1
EXIT_PARTIAL_FAILURE = 2


@dataclass
class ImageResult:
    """Outcome of enhancing one file."""
    image_name: str
    success: bool
    output_path: Optional[str] = None
    error: Optional[str] = None
    image_shape: Optional[Tuple[int, ...]] = None
    processing_time_seconds: float = 0.0
    metrics: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe form; non-finite metrics (PSNR of an unchanged image) become None."""
        data = asdict(self)
        data["metrics"] = {k: (v if math.isfinite(v) else None)
                           for k, v in self.metrics.items()}
        return data


def is_supported(path: Union[str, Path]) -> bool:
    """True if the file extension is one the batch handles (case-insensitive)."""
    return Path(path).suffix.lower() in SUPPORTED_EXTENSIONS


def find_images(input_dir: Union[str, Path]) -> List[Path]:
    """
    List supported image files directly inside input_dir.

    Subdirectories are skipped, not descended into.

    Raises:
        FileNotFoundError: If input_dir does not exist or is not a directory
    """
    input_dir = Path(input_dir)
    if not input_dir.is_dir():
        raise FileNotFoundError(f"Could not open images directory: {input_dir}")

    return sorted(p for p in input_dir.iterdir() if p.is_file() and is_supported(p))


def process_image_file(path: Union[str, Path], output_dir: Union[str, Path],
                       recipe: EnhancementRecipe = DEFAULT_RECIPE,
                       jpeg_quality: int = JPEG_QUALITY) -> ImageResult:
    """
    Decode, enhance and encode one file.

    Decode, encode and enhancement failures are returned as a failed
    ImageResult rather than raised, so one image cannot abort the batch.

    Args:
        path: Source image path
        output_dir: Destination directory; the output keeps the source name
        recipe: Enhancement recipe
        jpeg_quality: Quality used when the output is JPEG

    Returns:
        ImageResult describing the outcome
    """
    path = Path(path)
    out_path = Path(output_dir) / path.name
    start_time = time.time()

    try:
        img = read_image(path)
    except DecodeError as e:
        logger.warning("Could not open image: %s (%s)", path, e)
        return ImageResult(image_name=path.name, success=False, error=str(e),
                           processing_time_seconds=time.time() - start_time)

    logger.info("Enhancing: %s", path)
    try:
        enhanced = enhance_image(img, recipe)
    except Exception as e:
        logger.exception("Error processing %s", path)
        return ImageResult(image_name=path.name, success=False,
                           error=f"{type(e).__name__}: {e}",
                           image_shape=tuple(img.shape),
                           processing_time_seconds=time.time() - start_time)

    try:
        save_image(enhanced, out_path, quality=jpeg_quality)
    except EncodeError as e:
        logger.warning("Failed to save: %s (%s)", out_path, e)
        return ImageResult(image_name=path.name, success=False, error=str(e),
                           image_shape=tuple(img.shape),
                           processing_time_seconds=time.time() - start_time)

    processing_time = time.time() - start_time
    logger.info("Saved enhanced image to: %s", out_path)

    return ImageResult(
        image_name=path.name,
        success=True,
        output_path=str(out_path),
        image_shape=tuple(img.shape),
        processing_time_seconds=processing_time,
        metrics=compute_metrics(img, enhanced),
    )


def process_batch(input_dir: Union[str, Path], output_dir: Union[str, Path],
                  recipe: EnhancementRecipe = DEFAULT_RECIPE,
                  workers: Optional[int] = None,
                  jpeg_quality: int = JPEG_QUALITY) -> List[ImageResult]:
    """
    Enhance every supported image in input_dir into output_dir.

    Args:
        input_dir: Directory scanned non-recursively for .jpg/.jpeg/.png/.bmp
        output_dir: Destination directory, created if missing
        recipe: Enhancement recipe applied to every image
        workers: Worker processes; None uses one per CPU, 1 runs in-process
        jpeg_quality: Quality used for JPEG outputs

    Returns:
        One ImageResult per input file, in input order

    Raises:
        FileNotFoundError: If input_dir cannot be opened
    """
    image_files = find_images(input_dir)
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if workers is None:
        workers = os.cpu_count() or 1
    workers = max(1, min(workers, len(image_files) or 1))

    logger.info("Processing %d images from %s with %d worker(s)",
                len(image_files), input_dir, workers)

    task = partial(process_image_file, output_dir=output_dir,
                   recipe=recipe, jpeg_quality=jpeg_quality)

    if workers == 1:
        return [task(path) for path in image_files]

    with ProcessPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(task, image_files))


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Sharpen and equalize every image in a directory.")
    parser.add_argument('--input', dest='input_dir', default=DEFAULT_CONFIG['input_dir'],
                        help="directory with source images (default: %(default)s)")
    parser.add_argument('--output', dest='output_dir', default=DEFAULT_CONFIG['output_dir'],
                        help="directory for enhanced images (default: %(default)s)")
    parser.add_argument('--workers', type=int, default=DEFAULT_CONFIG['workers'],
                        help="worker processes (default: one per CPU)")
    parser.add_argument('--report', action=argparse.BooleanOptionalAction,
                        default=DEFAULT_CONFIG['report'],
                        help="write a JSON report into the output directory")
    parser.add_argument('--charts', action='store_true', default=DEFAULT_CONFIG['charts'],
                        help="also render a chart sheet of the batch metrics")
    parser.add_argument('-v', '--verbose', action='store_true', help="debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point. Returns the process exit code."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )

    config = dict(DEFAULT_CONFIG)
    config.update({k: v for k, v in vars(args).items() if k in DEFAULT_CONFIG})

    output_dir = Path(config['output_dir'])
    start_batch_time = time.time()

    try:
        results = process_batch(config['input_dir'], output_dir,
                                workers=config.get('workers'),
                                jpeg_quality=config.get('jpeg_quality', JPEG_QUALITY))
    except FileNotFoundError as e:
        logger.error("%s", e)
        return EXIT_NO_INPUT

    total_batch_time = time.time() - start_batch_time

    if config.get('report'):
        generate_report(results, output_dir, total_batch_time, DEFAULT_RECIPE)
    if config.get('charts'):
        create_batch_visualizations(results, output_dir)

    failed = [r for r in results if not r.success]
    if failed:
        logger.warning("%d of %d images failed", len(failed), len(results))
        return EXIT_PARTIAL_FAILURE

    logger.info("All images processed successfully!")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
