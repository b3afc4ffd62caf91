"""
Tests for StatsCruncher and its endings cache.
"""
import pytest

from garbler.services.char_map import OccurrenceMap, RecommendationMap
from garbler.services.occurrence import OccurrenceList
from garbler.services.stats_cruncher import EndingsCache, StatsCruncher
from garbler.services.stats_library import StatsLibrary


class TestStatsCruncherConfiguration:
    """Test suite for tunable factors."""

    def test_defaults(self):
        """Test default factors."""
        cruncher = StatsCruncher()

        assert cruncher.close_character_preference == 0.5
        assert cruncher.same_character_weight_adjust == 0.85
        assert cruncher.eow_factor_threshold == 1.0
        assert cruncher.ending_length == 2
        assert cruncher.primary_cache_size == 32
        assert cruncher.secondary_cache_size == 32

    def test_creates_library(self):
        """Test a cruncher without a library gets an empty one."""
        cruncher = StatsCruncher()

        assert isinstance(cruncher.library, StatsLibrary)

    @pytest.mark.parametrize(
        "name,value",
        [
            ("close_character_preference", -0.1),
            ("close_character_preference", 1.1),
            ("same_character_weight_adjust", -0.01),
            ("eow_factor_threshold", -0.5),
            ("eow_factor_threshold", 1.5),
            ("ending_length", 0),
            ("primary_cache_size", -1),
            ("secondary_cache_size", -1),
            ("close_character_preference", float("nan")),
            ("same_character_weight_adjust", float("nan")),
            ("same_character_weight_adjust", float("inf")),
            ("eow_factor_threshold", float("nan")),
            ("ending_length", 2.7),
            ("primary_cache_size", float("inf")),
            ("secondary_cache_size", 1.5),
        ],
    )
    def test_out_of_range(self, name, value):
        """Test invalid values raise and leave the factor unchanged."""
        cruncher = StatsCruncher()
        before = getattr(cruncher, name)

        with pytest.raises(ValueError):
            cruncher.configure(name, value)
        assert getattr(cruncher, name) == before

    def test_constructor_validates(self):
        """Test constructor arguments are validated."""
        with pytest.raises(ValueError):
            StatsCruncher(close_character_preference=2.0)

    def test_configure_by_name(self):
        """Test factors can be set by name."""
        cruncher = StatsCruncher()
        cruncher.configure("same_character_weight_adjust", 1.5)

        assert cruncher.same_character_weight_adjust == 1.5
        assert cruncher.factors()["same_character_weight_adjust"] == 1.5

    def test_configure_unknown(self):
        """Test unknown factor names are rejected."""
        cruncher = StatsCruncher()

        with pytest.raises(ValueError):
            cruncher.configure("temperature", 0.5)

    def test_reset(self):
        """Test reset restores defaults."""
        cruncher = StatsCruncher(close_character_preference=0.9, ending_length=3)
        cruncher.reset()

        assert cruncher.close_character_preference == 0.5
        assert cruncher.ending_length == 2

    def test_whole_float_sizes(self):
        """Test integral floats are accepted for integer factors."""
        cruncher = StatsCruncher()
        cruncher.configure("ending_length", 3.0)
        cruncher.configure("primary_cache_size", 8.0)

        assert cruncher.ending_length == 3
        assert cruncher.primary_cache_size == 8
        assert isinstance(cruncher.ending_length, int)


class TestReduceInfluenceMap:
    """Test suite for the aging reduction."""

    def _influence(self, counts):
        influence = OccurrenceMap()
        influence["x"] = OccurrenceList(counts)
        return influence

    def test_aging_recurrence(self):
        """Test the fold from farthest to nearest."""
        cruncher = StatsCruncher()

        reduced = cruncher.reduce_influence_map(self._influence([4, 2]))

        # i=1: 0.5 * 2 = 1.0; i=0: 1.0 * 0.5 + 0.5 * 4 = 2.5
        assert reduced["x"] == pytest.approx(2.5)

    def test_full_preference_keeps_nearest(self):
        """Test preference 1.0 keeps only the nearest sample."""
        cruncher = StatsCruncher(close_character_preference=1.0)

        reduced = cruncher.reduce_influence_map(self._influence([4, 2, 9]))

        assert reduced["x"] == pytest.approx(4.0)

    def test_zero_preference_degenerates(self):
        """Test preference 0.0 ignores everything."""
        cruncher = StatsCruncher(close_character_preference=0.0)

        reduced = cruncher.reduce_influence_map(self._influence([4, 2]))

        assert reduced["x"] == pytest.approx(0.0)

    def test_empty_map(self):
        """Test empty influence reduces to an empty map."""
        cruncher = StatsCruncher()

        assert len(cruncher.reduce_influence_map(OccurrenceMap())) == 0


class TestAppendRecommendations:
    """Test suite for recommendation assembly."""

    def test_follower_recommended(self, prefix_library):
        """Test 'd' is recommended after 'abc' and 'z' is absent."""
        cruncher = StatsCruncher(prefix_library)

        recommendations = cruncher.generate_append_recommendations("abc")

        assert isinstance(recommendations, RecommendationMap)
        assert recommendations["d"] > 0
        assert "z" not in recommendations

    def test_not_normalized(self, prefix_library):
        """Test the raw recommendations are weights, not probabilities."""
        cruncher = StatsCruncher(prefix_library)

        recommendations = cruncher.generate_append_recommendations("ab")

        assert recommendations.total() != pytest.approx(1.0)

    def test_same_character_adjust(self, prefix_library):
        """Test repeating the last character is scaled."""
        plain = StatsCruncher(prefix_library, same_character_weight_adjust=1.0)
        damped = StatsCruncher(prefix_library)

        base = plain.generate_append_recommendations("aa")["a"]
        adjusted = damped.generate_append_recommendations("aa")["a"]

        assert base > 0
        assert adjusted == pytest.approx(base * 0.85)

    def test_same_character_adjust_zero(self, prefix_library):
        """Test a zero adjust removes the repeat weight."""
        cruncher = StatsCruncher(prefix_library, same_character_weight_adjust=0.0)

        assert cruncher.generate_append_recommendations("aa")["a"] == 0.0

    def test_cached_result_is_stable(self, prefix_library):
        """Test a cache hit gives the same recommendations."""
        cruncher = StatsCruncher(prefix_library)

        first = cruncher.generate_append_recommendations("aa").to_dict()
        second = cruncher.generate_append_recommendations("aa").to_dict()
        third = cruncher.generate_append_recommendations("aa").to_dict()

        assert second == pytest.approx(first)
        assert third == pytest.approx(first)

    def test_preference_change_drops_cache(self, prefix_library):
        """Test a new aging preference is not mixed with stale cached endings."""
        cruncher = StatsCruncher(prefix_library)
        cruncher.generate_append_recommendations("abc")
        cruncher.generate_append_recommendations("abc")

        cruncher.configure("close_character_preference", 0.9)
        warm = cruncher.generate_append_recommendations("abc").to_dict()
        fresh = StatsCruncher(prefix_library, close_character_preference=0.9)

        assert warm == pytest.approx(fresh.generate_append_recommendations("abc").to_dict())
        assert cruncher.primary_cache_contents() == []

    def test_same_preference_keeps_cache(self, prefix_library):
        """Test re-applying the current preference keeps cached endings."""
        cruncher = StatsCruncher(prefix_library)
        cruncher.generate_append_recommendations("abc")

        cruncher.configure("close_character_preference", 0.5)

        assert cruncher.secondary_cache_contents() == ["bc"]

    def test_short_sequence(self, prefix_library):
        """Test sequences shorter than the ending are cached whole."""
        cruncher = StatsCruncher(prefix_library)

        recommendations = cruncher.generate_append_recommendations("a")

        assert "b" in recommendations
        assert cruncher.secondary_cache_contents() == ["a"]

    def test_empty_sequence(self, prefix_library):
        """Test an empty sequence gives no recommendations."""
        cruncher = StatsCruncher(prefix_library)

        assert len(cruncher.generate_append_recommendations("")) == 0


class TestEndingsCache:
    """Test suite for the two-tier cache."""

    def test_miss_goes_to_secondary(self, prefix_library):
        """Test a computed ending lands only in the secondary cache."""
        cruncher = StatsCruncher(prefix_library)
        cruncher.generate_append_recommendations("abc")

        assert cruncher.secondary_cache_contents() == ["bc"]
        assert cruncher.primary_cache_contents() == []

    def test_second_request_promotes(self, prefix_library):
        """Test a repeated ending moves into the primary cache."""
        cruncher = StatsCruncher(prefix_library)
        cruncher.generate_append_recommendations("abc")
        cruncher.generate_append_recommendations("abc")

        assert cruncher.primary_cache_contents() == ["bc"]
        assert cruncher.secondary_cache_contents() == []

    def test_primary_disabled(self, prefix_library):
        """Test nothing becomes permanent with a zero primary cache."""
        cruncher = StatsCruncher(prefix_library, primary_cache_size=0)
        for _ in range(3):
            cruncher.generate_append_recommendations("abc")

        assert cruncher.primary_cache_contents() == []
        assert cruncher.secondary_cache_contents() == ["bc"]

    def test_secondary_drops_oldest(self, prefix_library):
        """Test a full secondary cache evicts the oldest ending."""
        cruncher = StatsCruncher(prefix_library, secondary_cache_size=2)
        for sequence in ("ab", "bc", "cd"):
            cruncher.generate_append_recommendations(sequence)

        assert cruncher.secondary_cache_contents() == ["cd", "bc"]

    def test_shrink_secondary_evicts(self, prefix_library):
        """Test shrinking the secondary cache evicts immediately."""
        cruncher = StatsCruncher(prefix_library)
        for sequence in ("ab", "bc", "cd"):
            cruncher.generate_append_recommendations(sequence)

        cruncher.secondary_cache_size = 1

        assert cruncher.secondary_cache_contents() == ["cd"]

    def test_shrink_primary_keeps_entries(self, prefix_library):
        """Test shrinking the primary cache only blocks promotions."""
        cruncher = StatsCruncher(prefix_library)
        cruncher.generate_append_recommendations("bc")
        cruncher.generate_append_recommendations("bc")

        cruncher.primary_cache_size = 0
        cruncher.generate_append_recommendations("cd")
        cruncher.generate_append_recommendations("cd")

        assert cruncher.primary_cache_contents() == ["bc"]
        assert cruncher.secondary_cache_contents() == ["cd"]

    def test_disabled_secondary_stores_nothing(self, prefix_library):
        """Test a zero secondary cache keeps nothing."""
        cruncher = StatsCruncher(prefix_library, secondary_cache_size=0)
        cruncher.generate_append_recommendations("abc")
        cruncher.generate_append_recommendations("abc")

        assert cruncher.secondary_cache_contents() == []
        assert cruncher.primary_cache_contents() == []

    def test_clear(self, prefix_library):
        """Test clear empties both tiers and counts entries."""
        cruncher = StatsCruncher(prefix_library)
        cruncher.generate_append_recommendations("bc")
        cruncher.generate_append_recommendations("bc")
        cruncher.generate_append_recommendations("cd")

        assert cruncher.clear_cache() == 2
        assert len(cruncher.cache) == 0

    def test_standalone_cache(self):
        """Test the cache on its own."""
        cache = EndingsCache(primary_size=1, secondary_size=2)
        cache.push("ab", "first")
        cache.push("cd", "second")

        assert cache.get("zz") is None
        assert cache.get("ab") == "first"
        assert cache.get("cd") == "second"
        assert cache.primary_contents() == ["ab"]
        assert cache.secondary_contents() == ["cd"]

    def test_standalone_cache_rejects_negative(self):
        """Test negative sizes are rejected."""
        with pytest.raises(ValueError):
            EndingsCache(primary_size=-1)


class TestEOWFactor:
    """Test suite for the end-of-word estimator."""

    def test_exact_value(self, prefix_library):
        """Test a character only seen last."""
        cruncher = StatsCruncher(prefix_library)

        # 'e' only ends "abcde": mass 1.0 at distance 0, aged once by 0.5
        assert cruncher.eow_factor("e") == pytest.approx(0.5)

    def test_threshold_scales(self, prefix_library):
        """Test the threshold rescales and clamps."""
        cruncher = StatsCruncher(prefix_library, eow_factor_threshold=0.5)

        assert cruncher.eow_factor("e") == pytest.approx(1.0)

    @pytest.mark.parametrize("sequence", ["a", "ab", "abc", "bbb", "aaaa", "cd", "e"])
    def test_range(self, prefix_library, sequence):
        """Test the factor is a probability."""
        cruncher = StatsCruncher(prefix_library)

        assert 0.0 <= cruncher.eow_factor(sequence) <= 1.0

    @pytest.mark.parametrize("sequence", ["a", "ab", "abc", "bbb", "aab"])
    def test_lower_threshold_never_decreases(self, prefix_library, sequence):
        """Test thresholds below 1.0 only raise the factor."""
        base = StatsCruncher(prefix_library).eow_factor(sequence)
        eager = StatsCruncher(prefix_library, eow_factor_threshold=0.3).eow_factor(sequence)

        assert eager >= base

    def test_zero_threshold_saturates(self, prefix_library):
        """Test a zero threshold treats any signal as certain."""
        cruncher = StatsCruncher(prefix_library, eow_factor_threshold=0.0)

        assert cruncher.eow_factor("e") == 1.0
        assert cruncher.eow_factor("zz") == 0.0

    def test_unknown_characters(self, prefix_library):
        """Test unknown characters contribute nothing."""
        cruncher = StatsCruncher(prefix_library)

        assert cruncher.eow_factor("zz") == 0.0
        assert cruncher.eow_factor("") == 0.0


class TestPrimaryDistribution:
    """Test suite for the first-character distribution."""

    def test_distribution(self, prefix_library):
        """Test every training word starts with 'a'."""
        cruncher = StatsCruncher(prefix_library)

        assert cruncher.primary_character_distribution.to_dict() == {"a": pytest.approx(1.0)}

    def test_recalculate_after_ingestion(self):
        """Test the distribution only changes on recalculation."""
        library = StatsLibrary()
        library.parse_line("ab cd")
        cruncher = StatsCruncher(library)
        library.parse_line("ef ef")

        assert "e" not in cruncher.primary_character_distribution
        cruncher.recalculate_metrics()
        assert cruncher.primary_character_distribution["e"] == pytest.approx(0.5)
