"""Country code to language/locale lookup."""

import json
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

from recommendations.models import Locale, LocaleTableFile

LOCALES_PATH = Path(__file__).parent / "data" / "locales.json"

DEFAULT_LOCALE = Locale(lang="en", locale="en-US")


@lru_cache
def get_locale_table() -> Mapping[str, Locale]:
    """Load the country -> Locale table once."""
    raw = LocaleTableFile.model_validate(json.loads(LOCALES_PATH.read_text(encoding="utf-8")))
    return MappingProxyType({code.lower(): locale for code, locale in raw.countries.items()})


def resolve_locale(country_code: str | None) -> Locale:
    """Return the language/locale for a country, falling back to English (US)."""
    if not country_code:
        return DEFAULT_LOCALE
    return get_locale_table().get(country_code.strip().lower(), DEFAULT_LOCALE)
