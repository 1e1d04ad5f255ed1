"""Locale resolution and parameter interpolation for text lookups."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Sequence, Union

from .base import TextProvider

logger = logging.getLogger(__name__)

Params = Union[Mapping[str, Any], Sequence[Any], None]


def candidate_locales(locales: Iterable[str], default_locale: str) -> List[str]:
    """Expand ``locales`` into an ordered, de-duplicated lookup list.

    Regional locales fall back to their base language (``zh-TW`` then ``zh``)
    and the default locale is always tried last.
    """
    result: List[str] = []
    for locale in [*locales, default_locale]:
        if not locale:
            continue
        for candidate in (locale, locale.split("-")[0]):
            if candidate not in result:
                result.append(candidate)
    return result


def interpolate(template: str, params: Params) -> str:
    """Fill ``template`` with ``params``.

    Mappings fill named fields, sequences fill positional ones (``{0}``).
    A template referencing a missing parameter is returned unformatted.
    """
    try:
        if params is None:
            return template.format()
        if isinstance(params, Mapping):
            return template.format(**params)
        if isinstance(params, (str, bytes)):
            return template.format(params)
        return template.format(*params)
    except (KeyError, IndexError, ValueError) as e:
        logger.debug(f"Could not interpolate text template: {e!r}")
        return template


def render(
    provider: TextProvider,
    path: str,
    params: Params = None,
    locales: Iterable[str] = (),
    default_locale: str = "en",
) -> str:
    """
    Look up ``path`` for the first matching locale and interpolate ``params``.

    Args:
        provider: The text catalog to query.
        path: Dotted text path.
        params: Named or positional interpolation parameters.
        locales: Preferred locales, most preferred first.
        default_locale: Locale tried after every preferred one.

    Returns:
        The rendered text, or ``path`` itself when no locale knows it.
    """
    for locale in candidate_locales(locales, default_locale):
        try:
            template = provider.get(path, locale=locale)
        except KeyError:
            continue
        return interpolate(template, params)
    logger.debug(f"Missing text for path '{path}' (version={provider.version()})")
    return path
