"""Unit tests for scoring/score.py."""

import pytest

from scoring.config import DEFAULT_SCORING_CONFIG, TieBreaker
from scoring.score import (
    apply_tie_breaker,
    format_scoring_result,
    score_candidate,
    score_country,
    score_cover_art,
    score_label_info,
    score_media_type,
    score_source,
    score_track_list,
    select_primary,
)
from tests.factories import (
    make_config,
    make_discogs,
    make_flat_config,
    make_group,
    make_musicbrainz,
    make_normalized,
    make_tracks,
)

CONFIG = DEFAULT_SCORING_CONFIG


# ---------------------------------------------------------------------------
# Individual rules
# ---------------------------------------------------------------------------


class TestScoreMediaType:
    def test_preferred_type_awards_weight(self):
        points, rules = score_media_type(make_normalized(format="Vinyl, LP, Album"), CONFIG)
        assert points == 20
        assert rules == ['Format "Vinyl, LP, Album" matches preferred type "vinyl" (+20)']

    def test_matched_once_even_with_several_hits(self):
        points, rules = score_media_type(make_normalized(format='LP 12" Album'), CONFIG)
        assert points == 20
        assert len(rules) == 1

    def test_first_configured_type_wins(self):
        """With overlapping tokens the configured order decides which one is reported."""
        lp_first = make_config(preferredMediaTypes=["lp", "album"])
        album_first = make_config(preferredMediaTypes=["album", "lp"])
        candidate = make_normalized(format="LP, Album")

        _, lp_rules = score_media_type(candidate, lp_first)
        _, album_rules = score_media_type(candidate, album_first)

        assert 'preferred type "lp"' in lp_rules[0]
        assert 'preferred type "album"' in album_rules[0]

    def test_substring_match_case_insensitive(self):
        points, _ = score_media_type(make_normalized(format="2xVINYL"), CONFIG)
        assert points == 20

    def test_non_preferred_type(self):
        points, rules = score_media_type(make_normalized(format="CD"), CONFIG)
        assert points == 0
        assert rules == ['Format "CD" does not match any preferred media type']

    def test_no_format(self):
        points, rules = score_media_type(make_normalized(format=None), CONFIG)
        assert points == 0
        assert rules == ["No format information available"]


class TestScoreCountry:
    @pytest.mark.parametrize("country", ["US", "uk", "Germany"], ids=["US", "uk", "Germany"])
    def test_preferred(self, country):
        points, rules = score_country(make_normalized(country=country), CONFIG)
        assert points == 15
        assert rules == [f'Country "{country}" is preferred (+15)']

    def test_deprioritized(self):
        points, rules = score_country(make_normalized(country="RU"), CONFIG)
        assert points == -10
        assert rules == ['Country "RU" is de-prioritized (-10)']

    def test_neutral(self):
        points, rules = score_country(make_normalized(country="JP"), CONFIG)
        assert points == 0
        assert rules == ['Country "JP" is neutral (no bonus/penalty)']

    def test_exact_match_only(self):
        points, _ = score_country(make_normalized(country="USSR"), CONFIG)
        assert points == 0

    def test_missing(self):
        points, rules = score_country(make_normalized(country=None), CONFIG)
        assert points == 0
        assert rules == ["No country information available"]


class TestScoreTrackList:
    def test_complete(self):
        points, rules = score_track_list(make_normalized(track_list=make_tracks(4)), CONFIG)
        assert points == 25
        assert rules == ["Complete track list (4 tracks >= 4) (+25)"]

    def test_partial(self):
        points, rules = score_track_list(make_normalized(track_list=make_tracks(2)), CONFIG)
        assert points == 10
        assert rules == ["Partial track list (2 tracks < 4) (+10)"]

    def test_fractional_threshold(self):
        config = make_config(minTracksForComplete=2.5)
        points, rules = score_track_list(make_normalized(track_list=make_tracks(3)), config)
        assert points == 25
        assert rules == ["Complete track list (3 tracks >= 2.5) (+25)"]

    def test_empty(self):
        points, rules = score_track_list(make_normalized(), CONFIG)
        assert points == 0
        assert rules == ["No track list available"]

    def test_blank_titles_not_counted(self):
        tracks = [*make_tracks(3), make_tracks(1)[0].model_copy(update={"title": "  "})]
        points, _ = score_track_list(make_normalized(track_list=tracks), CONFIG)
        assert points == 10

    def test_threshold_configurable(self):
        config = make_config(minTracksForComplete=2)
        points, _ = score_track_list(make_normalized(track_list=make_tracks(2)), config)
        assert points == 25


class TestScoreCoverArt:
    def test_present(self):
        points, rules = score_cover_art(make_normalized(cover_image_url="https://x/y.jpg"), CONFIG)
        assert points == 15
        assert rules == ["Cover art available (+15)"]

    @pytest.mark.parametrize("url", [None, ""], ids=["none", "empty"])
    def test_absent(self, url):
        points, rules = score_cover_art(make_normalized(cover_image_url=url), CONFIG)
        assert points == 0
        assert rules == ["No cover art available"]


class TestScoreLabelInfo:
    def test_label_and_catalog_number_additive(self):
        points, rules = score_label_info(
            make_normalized(label="Harvest", catalog_number="SHVL 804"), CONFIG
        )
        assert points == 15
        assert rules == [
            'Label information available: "Harvest" (+10)',
            'Catalog number available: "SHVL 804" (+5)',
        ]

    def test_catalog_number_without_label(self):
        points, rules = score_label_info(make_normalized(catalog_number="SHVL 804"), CONFIG)
        assert points == 5
        assert rules[0] == "No label information available"

    def test_neither(self):
        points, rules = score_label_info(make_normalized(), CONFIG)
        assert points == 0
        assert rules == ["No label information available", "No catalog number available"]


class TestScoreSource:
    def test_discogs_bonus(self):
        points, rules = score_source(make_normalized(source="DISCOGS"), CONFIG)
        assert points == 5
        assert rules == ["Discogs source bonus (+5)"]

    def test_musicbrainz_zero(self):
        points, rules = score_source(make_normalized(source="MUSICBRAINZ"), CONFIG)
        assert points == 0
        assert rules == ["No MusicBrainz source bonus (0)"]

    def test_negative_base_score(self):
        config = make_config(sources={"musicbrainz": {"baseScore": -3}})
        points, rules = score_source(make_normalized(source="MUSICBRAINZ"), config)
        assert points == -3
        assert rules == ["MusicBrainz source bonus (-3)"]


# ---------------------------------------------------------------------------
# score_candidate
# ---------------------------------------------------------------------------


class TestScoreCandidate:
    def test_total_is_sum_of_breakdown(self):
        candidate = make_normalized(
            format="Vinyl",
            country="US",
            track_list=make_tracks(10),
            cover_image_url="https://x/y.jpg",
            label="Harvest",
            catalog_number="SHVL 804",
        )
        result = score_candidate(candidate, CONFIG)

        assert result.breakdown.media_type == 20
        assert result.breakdown.country == 15
        assert result.breakdown.track_list == 25
        assert result.breakdown.cover_art == 15
        assert result.breakdown.label_info == 15
        assert result.breakdown.source_bonus == 5
        assert result.total_score == 95
        assert result.candidate_id == "DISCOGS:1"

    def test_total_may_be_negative(self):
        config = make_flat_config(weights={"deprioritizedCountry": -10})
        result = score_candidate(make_normalized(country="CN"), config)
        assert result.total_score == -10

    def test_every_rule_explains_itself(self):
        result = score_candidate(make_normalized(), CONFIG)
        assert result.applied_rules == [
            "No format information available",
            "No country information available",
            "No track list available",
            "No cover art available",
            "No label information available",
            "No catalog number available",
            "Discogs source bonus (+5)",
        ]

    def test_audit_lines_follow_rule_order(self):
        result = score_candidate(make_normalized(format="CD", country="JP"), CONFIG)
        assert result.applied_rules[0].startswith('Format "CD"')
        assert result.applied_rules[1].startswith('Country "JP"')


# ---------------------------------------------------------------------------
# Tie-breaking and primary selection
# ---------------------------------------------------------------------------


class TestApplyTieBreaker:
    def test_earliest_year(self):
        tied = [
            make_normalized(external_id="1", year=1990),
            make_normalized(external_id="2", year=1973),
        ]
        assert apply_tie_breaker(tied, TieBreaker.EARLIEST_YEAR) == 1

    def test_earliest_year_missing_year_sorts_last(self):
        tied = [make_normalized(external_id="1"), make_normalized(external_id="2", year=2020)]
        assert apply_tie_breaker(tied, TieBreaker.EARLIEST_YEAR) == 1

    def test_earliest_year_falls_back_to_smallest_id(self):
        tied = [
            make_normalized(external_id="9", year=1973),
            make_normalized(external_id="1", year=1973),
        ]
        assert apply_tie_breaker(tied, TieBreaker.EARLIEST_YEAR) == 1

    def test_smallest_id_is_lexicographic_over_composite_id(self):
        tied = [
            make_normalized(external_id="10", source="DISCOGS"),
            make_normalized(external_id="9", source="DISCOGS"),
            make_normalized(external_id="0", source="MUSICBRAINZ"),
        ]
        # "DISCOGS:10" < "DISCOGS:9" < "MUSICBRAINZ:0"
        assert apply_tie_breaker(tied, TieBreaker.SMALLEST_ID) == 0

    def test_prefer_musicbrainz_picks_first_match(self):
        tied = [
            make_normalized(external_id="1", source="DISCOGS"),
            make_normalized(external_id="b", source="MUSICBRAINZ"),
            make_normalized(external_id="a", source="MUSICBRAINZ"),
        ]
        assert apply_tie_breaker(tied, TieBreaker.PREFER_MUSICBRAINZ) == 1

    def test_prefer_discogs(self):
        tied = [
            make_normalized(external_id="a", source="MUSICBRAINZ"),
            make_normalized(external_id="1", source="DISCOGS"),
        ]
        assert apply_tie_breaker(tied, TieBreaker.PREFER_DISCOGS) == 1

    def test_preference_without_match_falls_back_to_earliest_year(self):
        tied = [
            make_normalized(external_id="1", source="DISCOGS", year=1990),
            make_normalized(external_id="2", source="DISCOGS", year=1980),
        ]
        assert apply_tie_breaker(tied, TieBreaker.PREFER_MUSICBRAINZ) == 1

    def test_unset_strategy_picks_first(self):
        tied = [
            make_normalized(external_id="9", year=2000),
            make_normalized(external_id="1", year=1970),
        ]
        assert apply_tie_breaker(tied, None) == 0

    def test_single_candidate(self):
        assert apply_tie_breaker([make_normalized()], TieBreaker.SMALLEST_ID) == 0


class TestSelectPrimary:
    def test_singleton_is_primary_and_still_scored(self):
        group = make_group(make_discogs("1", format="Vinyl"))
        selection = select_primary(group, CONFIG)

        assert selection.primary.external_id == "1"
        assert selection.primary_index == 0
        assert selection.primary_score.total_score == 25
        assert len(selection.all_scores) == 1

    def test_highest_score_wins(self):
        group = make_group(
            make_musicbrainz("mb-1", format="CD"),
            make_musicbrainz("mb-2", format="Vinyl"),
        )
        selection = select_primary(group, CONFIG)
        assert selection.primary.external_id == "mb-2"
        assert [s.total_score for s in selection.all_scores] == [0, 20]

    def test_tie_resolved_by_configured_strategy(self):
        group = make_group(
            make_musicbrainz("mb-b", year=1973),
            make_musicbrainz("mb-a", year=1973),
        )
        config = make_config(tieBreaker="smallestId")
        assert select_primary(group, config).primary.external_id == "mb-a"

    def test_tie_break_only_among_top_scores(self):
        group = make_group(
            make_musicbrainz("mb-1", year=1960),
            make_musicbrainz("mb-2", year=1990, format="Vinyl"),
            make_musicbrainz("mb-3", year=1980, format="Vinyl"),
        )
        selection = select_primary(group, CONFIG)
        assert selection.primary.external_id == "mb-3"
        assert selection.primary_index == 2

    def test_identical_score_and_year_resolves_to_smaller_id(self):
        group = make_group(
            make_musicbrainz("zzz", year=1973),
            make_musicbrainz("aaa", year=1973),
        )
        for _ in range(3):
            assert select_primary(group, CONFIG).primary.external_id == "aaa"

    def test_unset_tie_breaker_picks_first_tied(self):
        config = CONFIG.model_copy(update={"tie_breaker": None})
        group = make_group(
            make_musicbrainz("zzz", year=2000),
            make_musicbrainz("aaa", year=1970),
        )
        assert select_primary(group, config).primary.external_id == "zzz"


class TestFormatScoringResult:
    def test_includes_breakdown_and_rules(self):
        result = score_candidate(make_normalized(format="Vinyl"), CONFIG)
        text = format_scoring_result(result)

        assert "Release: DISCOGS:1 (DISCOGS)" in text
        assert "Total Score: 25" in text
        assert "  - Media Type: 20" in text
        assert "  - Source Bonus: 5" in text
        assert '  - Format "Vinyl" matches preferred type "vinyl" (+20)' in text
