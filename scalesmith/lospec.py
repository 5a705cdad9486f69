"""Lospec palette API integration.

Fetches palettes from Lospec (https://lospec.com) and turns them into
scales that can be dropped into a palette with ``IMPORT_SCALES``.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Optional

import requests

from scalesmith import defaults
from scalesmith.app.commands import ImportScales
from scalesmith.presets import build_scale
from scalesmith.types import Scale

logger = logging.getLogger(__name__)


def _parse_response(data: dict, slug: str) -> dict:
    try:
        hex_colors = [f"#{c.lstrip('#')}" for c in data['colors']]
        return {
            'name': data['name'],
            'author': data.get('author', ''),
            'slug': slug,
            'hex_colors': hex_colors,
        }
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Unexpected Lospec response for {slug!r}: {e!r}") from e


def fetch_palette_by_slug(slug: str, timeout: float = defaults.LOSPEC_TIMEOUT) -> dict:
    """Fetch a specific palette by its Lospec slug.

    Args:
        slug: Palette slug (e.g., "apollo")
        timeout: Request timeout in seconds

    Returns:
        Dictionary with keys:
            - name (str): Palette name
            - author (str): Creator name
            - slug (str): URL slug
            - hex_colors (list[str]): ``#rrggbb`` strings in Lospec order

    Raises:
        requests.RequestException: If network request fails
        ValueError: If response format is invalid
    """
    response = requests.get(f'{defaults.LOSPEC_BASE_URL}/{slug}.json', timeout=timeout)
    response.raise_for_status()
    return _parse_response(response.json(), slug)


def fetch_random_palette(timeout: float = defaults.LOSPEC_TIMEOUT) -> dict:
    """Fetch a random palette from Lospec (same keys as ``fetch_palette_by_slug``)."""
    # Random endpoint redirects to the palette page; the slug is in the final URL
    response = requests.get(
        f'{defaults.LOSPEC_BASE_URL}/random',
        allow_redirects=True,
        timeout=timeout,
    )
    response.raise_for_status()
    slug = response.url.split('/palette-list/')[-1].split('?')[0].split('#')[0]
    logger.debug("Lospec random palette: %s", slug)
    return fetch_palette_by_slug(slug, timeout=timeout)


def fetch_palette_by_url(url: str, timeout: float = defaults.LOSPEC_TIMEOUT) -> dict:
    """Fetch a palette from a Lospec URL.

    Raises:
        ValueError: If URL format is invalid
        requests.RequestException: If network request fails
    """
    if '/palette-list/' not in url:
        raise ValueError(f"Invalid Lospec palette URL: {url}")

    slug = url.split('/palette-list/')[-1]
    slug = slug.split('?')[0].split('#')[0]
    if slug.endswith('.json'):
        slug = slug[:-len('.json')]

    return fetch_palette_by_slug(slug, timeout=timeout)


def palette_to_scales(
    data: dict,
    new_id: Optional[Callable[[], str]] = None,
    *,
    split: bool = False,
) -> dict[str, Scale]:
    """Build scales from fetched palette data.

    Args:
        data: Result of one of the ``fetch_*`` functions
        new_id: Id generator (UUID4 by default)
        split: One single-color scale per swatch instead of one ramp

    Returns:
        Scale map keyed by id, ready for ``ImportScales``
    """
    new_id = new_id if new_id is not None else (lambda: str(uuid.uuid4()))
    hex_colors = data['hex_colors']
    if not hex_colors:
        return {}

    if split:
        scales = [
            build_scale(new_id(), f"{data['name']} {i}", h)
            for i, h in enumerate(hex_colors)
        ]
    else:
        scales = [build_scale(new_id(), data['name'], hex_colors)]
    return {s.id: s for s in scales}


def import_command(palette_id: str, data: dict, *, replace: bool = False, split: bool = False) -> ImportScales:
    """``IMPORT_SCALES`` command for a fetched Lospec palette."""
    return ImportScales(
        palette_id=palette_id,
        scales=palette_to_scales(data, split=split),
        replace=replace,
    )
