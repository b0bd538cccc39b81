"""
Enhancement pipeline orchestration.

The pipeline is a fixed recipe: a strong unsharp mask, hue-preserving
luminance equalization, then a light unsharp mask to restore crispness lost
to the tone remapping. Every image is processed independently with no state
kept between calls.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple
import logging
import numpy as np

from .equalize import equalize_luminance
from .io import check_image
from .sharpen import unsharp_mask


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SharpenParams:
    """Parameters of one unsharp-mask stage."""
    sigma: float
    radius: int
    amount: float

    def to_config(self) -> Dict[str, Any]:
        return {"sigma": self.sigma, "radius": self.radius, "amount": self.amount}


@dataclass(frozen=True)
class EnhancementRecipe:
    """
    Ordered enhancement stages.

    pre_sharpen stages run first, then equalization (if enabled), then
    post_sharpen stages.
    """
    pre_sharpen: Tuple[SharpenParams, ...] = (SharpenParams(sigma=1.3, radius=2, amount=1.1),)
    equalize: bool = True
    post_sharpen: Tuple[SharpenParams, ...] = (SharpenParams(sigma=0.9, radius=1, amount=0.4),)

    def to_config(self) -> Dict[str, Any]:
        """Plain-dict form, accepted back by recipe_from_config()."""
        return {
            "pre_sharpen": [p.to_config() for p in self.pre_sharpen],
            "equalize": self.equalize,
            "post_sharpen": [p.to_config() for p in self.post_sharpen],
        }


DEFAULT_RECIPE = EnhancementRecipe()


def recipe_from_config(cfg: Dict[str, Any]) -> EnhancementRecipe:
    """
    Build a recipe from a configuration dictionary.

    Missing keys fall back to DEFAULT_RECIPE.

    Args:
        cfg: Dictionary with optional 'pre_sharpen' and 'post_sharpen' lists of
            {'sigma', 'radius', 'amount'} dicts and an 'equalize' flag

    Returns:
        EnhancementRecipe

    Example:
        >>> recipe = recipe_from_config({'equalize': False, 'post_sharpen': []})
    """
    default = DEFAULT_RECIPE.to_config()

    def _stages(key: str) -> Tuple[SharpenParams, ...]:
        return tuple(
            SharpenParams(sigma=float(stage['sigma']),
                          radius=int(stage['radius']),
                          amount=float(stage['amount']))
            for stage in cfg.get(key, default[key])
        )

    return EnhancementRecipe(
        pre_sharpen=_stages('pre_sharpen'),
        equalize=bool(cfg.get('equalize', default['equalize'])),
        post_sharpen=_stages('post_sharpen'),
    )


def enhance_image(img: np.ndarray, recipe: EnhancementRecipe = DEFAULT_RECIPE) -> np.ndarray:
    """
    Run the enhancement recipe on one image.

    Pure and deterministic: the same input always yields the same output and
    the input array is not modified.

    Args:
        img: RGB image (H, W, 3) float in [0, 1]
        recipe: Stages to apply, DEFAULT_RECIPE unless overridden

    Returns:
        Enhanced float32 image in [0, 1]

    Example:
        >>> img = read_image("portrait.jpg")
        >>> save_image(enhance_image(img), "output/portrait.jpg")
    """
    check_image(img)
    h, w = img.shape[:2]
    logger.debug("Enhancing %dx%d image", w, h)

    work = img.astype(np.float32)

    for params in recipe.pre_sharpen:
        logger.debug("Unsharp mask sigma=%.2f radius=%d amount=%.2f",
                     params.sigma, params.radius, params.amount)
        work = unsharp_mask(work, params.sigma, params.radius, params.amount)

    if recipe.equalize:
        logger.debug("Luminance equalization")
        work = equalize_luminance(work)

    for params in recipe.post_sharpen:
        logger.debug("Unsharp mask sigma=%.2f radius=%d amount=%.2f",
                     params.sigma, params.radius, params.amount)
        work = unsharp_mask(work, params.sigma, params.radius, params.amount)

    return work
