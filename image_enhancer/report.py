"""
Batch reporting: JSON summary and an optional chart sheet.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Union
import json
import math
import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt


REPORT_NAME = 'enhancement_report.json'
CHARTS_NAME = 'enhancement_charts.png'


def _avg(results, key: str) -> float:
    vals = [r.metrics[key] for r in results
            if key in r.metrics and math.isfinite(r.metrics[key])]
    return float(np.mean(vals)) if vals else 0.0


def generate_report(results: List[Any], output_dir: Union[str, Path],
                    total_time: float, recipe) -> Dict[str, Any]:
    """
    Write the batch report and print a summary.

    Args:
        results: ImageResult list from process_batch()
        output_dir: Directory the report is written to
        total_time: Wall-clock time of the whole batch in seconds
        recipe: EnhancementRecipe the batch ran with

    Returns:
        The report dictionary that was written to enhancement_report.json
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    total_images = len(results)
    succeeded = [r for r in results if r.success]
    failed = [r for r in results if not r.success]
    times = [r.processing_time_seconds for r in succeeded]

    quantitative_summary = {
        'input_mean_luma_avg': _avg(succeeded, 'input_mean_luma'),
        'output_mean_luma_avg': _avg(succeeded, 'output_mean_luma'),
        'brightness_enhancement_avg': _avg(succeeded, 'brightness_enhancement'),
        'contrast_enhancement_avg': _avg(succeeded, 'contrast_enhancement'),
        'input_entropy_avg': _avg(succeeded, 'input_entropy'),
        'output_entropy_avg': _avg(succeeded, 'output_entropy'),
        'psnr_avg': _avg(succeeded, 'psnr'),
        'mae_avg': _avg(succeeded, 'mae'),
    }

    report = {
        'run_info': {
            'date': datetime.now().isoformat(),
            'total_images': total_images,
            'succeeded': len(succeeded),
            'failed': len(failed),
            'total_processing_time_seconds': total_time,
        },
        'recipe': recipe.to_config(),
        'quantitative_analysis': quantitative_summary,
        'performance_metrics': {
            'images_per_second': total_images / total_time if total_time > 0 else 0.0,
            'average_processing_time_seconds': float(np.mean(times)) if times else 0.0,
            'fastest_processing_time': min(times) if times else 0.0,
            'slowest_processing_time': max(times) if times else 0.0,
        },
        'failures': {r.image_name: r.error for r in failed},
        'detailed_results': [r.to_dict() for r in results],
    }

    report_file = output_dir / REPORT_NAME
    with open(report_file, 'w') as f:
        json.dump(report, f, indent=2, allow_nan=False)

    print("\n" + "=" * 60)
    print("IMAGE ENHANCEMENT REPORT")
    print("=" * 60)
    print(f"Total images: {total_images}")
    print(f"  Enhanced: {len(succeeded)}")
    print(f"  Failed: {len(failed)}")
    for r in failed:
        print(f"    {r.image_name}: {r.error}")
    print(f"Total processing time: {total_time:.1f} seconds")

    if succeeded:
        print(f"\nQuality Metrics:")
        print(f"  Mean luma: {quantitative_summary['input_mean_luma_avg']:.3f} -> "
              f"{quantitative_summary['output_mean_luma_avg']:.3f}")
        print(f"  Entropy: {quantitative_summary['input_entropy_avg']:.3f} -> "
              f"{quantitative_summary['output_entropy_avg']:.3f} bits")
        print(f"  Contrast enhancement (avg): {quantitative_summary['contrast_enhancement_avg']:.3f}")
        print(f"  PSNR vs input (avg): {quantitative_summary['psnr_avg']:.2f} dB")

    print(f"\nReport saved to: {report_file}")

    return report


def create_batch_visualizations(results: List[Any], output_dir: Union[str, Path]) -> Path:
    """
    Render a chart sheet of per-image metrics.

    Returns:
        Path of the saved PNG
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    succeeded = [r for r in results if r.success]

    fig, axes = plt.subplots(1, 3, figsize=(15, 4.5))

    if succeeded:
        luma_in = [r.metrics['input_mean_luma'] for r in succeeded]
        luma_out = [r.metrics['output_mean_luma'] for r in succeeded]
        axes[0].scatter(luma_in, luma_out, alpha=0.6, s=30)
        axes[0].plot([0, 1], [0, 1], color='black', linestyle='--', alpha=0.3)

        ent_in = [r.metrics['input_entropy'] for r in succeeded]
        ent_out = [r.metrics['output_entropy'] for r in succeeded]
        axes[1].hist([ent_in, ent_out], bins=10, alpha=0.7, label=['input', 'output'])
        axes[1].legend()

        times = [r.processing_time_seconds for r in succeeded]
        axes[2].hist(times, bins=10, alpha=0.7, color='orange')
        axes[2].axvline(np.mean(times), color='red', linestyle='--',
                        label=f'Mean: {np.mean(times):.3f}s')
        axes[2].legend()

    axes[0].set_xlabel('Input Mean Luma')
    axes[0].set_ylabel('Output Mean Luma')
    axes[0].set_title('Brightness')
    axes[1].set_xlabel('Luma Entropy (bits)')
    axes[1].set_title('Entropy')
    axes[2].set_xlabel('Processing Time (s)')
    axes[2].set_title('Processing Performance')
    for ax in axes:
        ax.grid(True, alpha=0.3)

    plt.tight_layout()
    chart_file = output_dir / CHARTS_NAME
    plt.savefig(chart_file, dpi=150, bbox_inches='tight')
    plt.close(fig)

    print(f"Visualization saved to: {chart_file}")
    return chart_file
