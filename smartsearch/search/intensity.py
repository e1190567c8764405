"""Degree adverbs ("매우", "꽤", "약간") -> severity tier -> default elapsed threshold."""

from typing import Dict

from smartsearch.search.synonyms import SynonymCategory, SynonymResolver, synonym_resolver

DEFAULT_INTENSITY = 1

# Severity tier -> minElapsedTime (ms) for a "slow" focus without explicit numbers
ELAPSED_THRESHOLD_BY_INTENSITY: Dict[int, int] = {
    3: 5000,
    2: 3000,
    1: 1000,
}


class IntensityScaler:

    def __init__(self, resolver: SynonymResolver = synonym_resolver):
        self.resolver = resolver

    def scale(self, query: str) -> int:
        level = self.resolver.resolve(query, SynonymCategory.INTENSITY)
        return level if level in ELAPSED_THRESHOLD_BY_INTENSITY else DEFAULT_INTENSITY

    @staticmethod
    def default_elapsed_threshold(intensity: int) -> int:
        return ELAPSED_THRESHOLD_BY_INTENSITY.get(intensity, ELAPSED_THRESHOLD_BY_INTENSITY[DEFAULT_INTENSITY])


intensity_scaler = IntensityScaler()
