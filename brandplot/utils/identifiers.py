"""Company identifier (``idUnico``) generation."""

from __future__ import annotations

import re
import time
from typing import Callable

ID_SUFFIX = "brandplot"
FALLBACK_PREFIX = "empresa"

_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^a-z0-9]")


def slugify_company_name(company_name: str) -> str:
    """Lower-case, trim, and keep only ASCII letters and digits.

    Accented letters are dropped rather than transliterated, so
    ``"Café & Co."`` becomes ``"cafco"``.
    """

    cleaned = company_name.lower().strip()
    cleaned = _WHITESPACE.sub("", cleaned)
    return _NON_ALNUM.sub("", cleaned)


def generate_id_unico(
    company_name: str | None,
    *,
    clock: Callable[[], float] = time.time,
) -> str:
    """Derive the stable identifier for a company.

    Examples:
        >>> generate_id_unico("Café & Co.")
        'cafco-brandplot'
        >>> generate_id_unico("Minha Marca")
        'minhamarca-brandplot'

    When the name is empty, a timestamp in epoch milliseconds stands in for
    the slug (``empresa-<ms>-brandplot``). Names with no letters or digits
    (``"&&& ***"``) deliberately take the same fallback instead of producing
    a bare ``"-brandplot"``, so they do not all collide on one identifier.
    """

    slug = slugify_company_name(company_name) if company_name else ""
    if not slug:
        return f"{FALLBACK_PREFIX}-{int(clock() * 1000)}-{ID_SUFFIX}"
    return f"{slug}-{ID_SUFFIX}"
