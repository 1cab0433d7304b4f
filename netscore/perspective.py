"""Map perspective-free scores onto a viewing team's side."""

from typing import Optional

from .constants import DRAW, LOSS, WIN
from .errors import InvalidPerspectiveError
from .models import Game, GameScore, PerspectiveScore, QuarterScore


def determine_result(our_score: int, their_score: int) -> str:
    """Win/loss/draw from our side. Ties are draws."""
    if our_score > their_score:
        return WIN
    if our_score < their_score:
        return LOSS
    return DRAW


def resolve_perspective(
    score: GameScore,
    game: Game,
    viewing_team_id: Optional[int] = None,
    advisories: tuple[str, ...] = (),
) -> PerspectiveScore:
    """
    Express a GameScore from the viewing team's side.

    GameScore holds home goals as goals_for and away goals as goals_against.
    The home team sees it as-is, the away team sees it swapped. With no
    viewing team (club-wide view) home/away figures are reported unchanged
    and no result is given.

    Args:
        score: Perspective-free score
        game: Game metadata for home/away team ids
        viewing_team_id: Team whose side to take, or None for club-wide
        advisories: Non-blocking notes to carry through (e.g. incomplete roster)

    Returns:
        PerspectiveScore

    Raises:
        InvalidPerspectiveError: viewing_team_id played in neither side of the game
    """
    if viewing_team_id is None:
        return PerspectiveScore(
            game_id=game.id,
            our_score=score.home_score,
            their_score=score.away_score,
            result=None,
            viewing_team_id=None,
            quarter_scores=score.quarter_scores,
            has_data=score.has_data,
            advisories=advisories,
        )

    if viewing_team_id == game.home_team_id:
        line = score.final_score
        quarters = score.quarter_scores
    elif viewing_team_id == game.away_team_id:
        line = score.final_score.swapped()
        quarters = tuple(
            QuarterScore(qs.quarter, qs.goals_against, qs.goals_for) for qs in score.quarter_scores
        )
    else:
        raise InvalidPerspectiveError(game.id, viewing_team_id)

    return PerspectiveScore(
        game_id=game.id,
        our_score=line.goals_for,
        their_score=line.goals_against,
        result=determine_result(line.goals_for, line.goals_against) if score.has_data else None,
        viewing_team_id=viewing_team_id,
        quarter_scores=quarters,
        has_data=score.has_data,
        advisories=advisories,
    )
