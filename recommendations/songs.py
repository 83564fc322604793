"""Mood-matched song selection from the static catalog."""

import json
import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

from recommendations.models import Mood, SongCatalogFile, SongEntry

logger = logging.getLogger(__name__)

SONGS_PATH = Path(__file__).parent / "data" / "songs.json"

SongPools = Mapping[Mood, tuple[SongEntry, ...]]


@dataclass(frozen=True)
class SongCatalog:
    """Read-only song pools: one global pool per mood, plus optional regional pools."""

    global_pools: SongPools
    regions: Mapping[str, SongPools]

    def pool_for(self, mood: Mood, country_code: str | None) -> tuple[SongEntry, ...]:
        """Return the regional pool for country+mood if there is one, else the global pool."""
        regional = self.regions.get((country_code or "").lower(), {})
        return regional.get(mood) or self.global_pools.get(mood, ())

    def __len__(self) -> int:
        regional = sum(len(pool) for pools in self.regions.values() for pool in pools.values())
        return regional + sum(len(pool) for pool in self.global_pools.values())


def _freeze(pools: dict[Mood, list[SongEntry]]) -> SongPools:
    return MappingProxyType({mood: tuple(songs) for mood, songs in pools.items() if songs})


def load_song_catalog(path: Path = SONGS_PATH) -> SongCatalog:
    """Load and validate the song table.

    Args:
        path: Path to a JSON file shaped like ``recommendations/data/songs.json``

    Returns:
        SongCatalog with immutable pools
    """
    raw = SongCatalogFile.model_validate(json.loads(path.read_text(encoding="utf-8")))
    catalog = SongCatalog(
        global_pools=_freeze(raw.global_pools),
        regions=MappingProxyType(
            {code.lower(): _freeze(pools) for code, pools in raw.regions.items()}
        ),
    )
    logger.info(f"Loaded {len(catalog)} songs ({len(catalog.regions)} regions) from {path.name}")
    return catalog


@lru_cache
def get_song_catalog() -> SongCatalog:
    """Get the process-wide song catalog, loading it on first use."""
    return load_song_catalog()


def pick_song(
    mood: Mood | str | None,
    country_code: str | None,
    rng: random.Random | None = None,
    catalog: SongCatalog | None = None,
) -> SongEntry | None:
    """Choose a song for a mood, preferring the country's own pool.

    Args:
        mood: Requested mood; absent or unrecognized values give no song
        country_code: Two-letter country code of the looked-up city
        rng: Optional random source (module-level random when omitted)
        catalog: Optional catalog override (process-wide catalog when omitted)

    Returns:
        A uniformly chosen SongEntry, or None
    """
    if not isinstance(mood, Mood):
        mood = Mood.parse(mood)
    if mood is None:
        return None

    if catalog is None:
        catalog = get_song_catalog()

    pool = catalog.pool_for(mood, country_code)
    if not pool:
        return None

    return (rng or random).choice(pool)
