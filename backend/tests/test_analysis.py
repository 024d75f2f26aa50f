from commstyle.analysis import (
    BALANCED_ANALYSIS,
    _percent,
    build_profile_analysis,
    primary_and_secondary,
    team_distribution,
)
from commstyle.profiles import PROFILES, ProfileColor
from commstyle.scoring import Scores


def test_zero_scores_give_balanced_narrative():
    assert build_profile_analysis(Scores()) == BALANCED_ANALYSIS


def test_percent_rounds_half_up():
    assert _percent(1, 8) == 13
    assert _percent(3, 8) == 38
    assert _percent(90, 300) == 30


def test_default_profile_mentions_secondary_style():
    analysis = build_profile_analysis(Scores(a=30, b=45, c=30, d=45))
    # green 90/300 = 30%, yellow 75/300 = 25%
    assert "dominant green style" in analysis.general
    assert "30%" in analysis.general
    assert "secondary style is yellow" in analysis.general
    assert "25%" in analysis.general
    assert "The yellow style adds" in analysis.strengths
    # red is the weakest composite
    assert "of the red style" in analysis.weaknesses
    assert PROFILES[ProfileColor.RED].recommendation_focus in analysis.recommendations


def test_extreme_red_profile():
    # red 150, yellow 75, blue 75, green 0
    analysis = build_profile_analysis(Scores(a=75, b=0, c=75, d=0))
    assert "dominant red style" in analysis.general
    assert "50%" in analysis.general
    assert "secondary style is yellow" in analysis.general
    assert "of the green style" in analysis.weaknesses


def test_sum_ties_follow_ranking_order():
    # red 40 and yellow 40 tie; red is ranked first
    analysis = build_profile_analysis(Scores(a=40, b=0, c=0, d=0))
    assert "dominant red style" in analysis.general
    assert "secondary style is yellow" in analysis.general


def test_primary_and_secondary():
    assert primary_and_secondary(Scores(a=30, b=45, c=30, d=45)) == (ProfileColor.GREEN, ProfileColor.YELLOW)


def test_team_distribution_skips_missing_scores():
    dist = team_distribution([
        Scores(a=75, b=0, c=75, d=0),
        None,
        Scores(a=0, b=75, c=0, d=75),
        Scores(a=30, b=45, c=30, d=45),
    ])
    assert dist.total == 3
    assert dist.by_dominant[ProfileColor.RED] == 1
    assert dist.by_dominant[ProfileColor.GREEN] == 2
    assert dist.by_dominant[ProfileColor.BLUE] == 0
    assert dist.by_composite[ProfileColor.GREEN] == 2
    assert sum(dist.by_composite.values()) == 3
