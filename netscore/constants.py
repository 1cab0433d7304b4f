"""Constants and mappings for the netscore engine."""

# Court positions in attacking-to-defending order
POSITIONS = ('GS', 'GA', 'WA', 'C', 'WD', 'GD', 'GK')

QUARTERS = (1, 2, 3, 4)

# Game statuses
UPCOMING = 'upcoming'
IN_PROGRESS = 'in-progress'
COMPLETED = 'completed'
FORFEIT_WIN = 'forfeit-win'
FORFEIT_LOSS = 'forfeit-loss'
HOME_TEAM_FORFEIT = 'home-team-forfeit'
AWAY_TEAM_FORFEIT = 'away-team-forfeit'
BYE = 'bye'
ABANDONED = 'abandoned'

GAME_STATUSES = (
    UPCOMING,
    IN_PROGRESS,
    COMPLETED,
    FORFEIT_WIN,
    FORFEIT_LOSS,
    HOME_TEAM_FORFEIT,
    AWAY_TEAM_FORFEIT,
    BYE,
    ABANDONED,
)

# Forfeit status -> True when the home team is awarded the game
FORFEIT_HOME_WINS = {
    FORFEIT_WIN: True,
    FORFEIT_LOSS: False,
    AWAY_TEAM_FORFEIT: True,
    HOME_TEAM_FORFEIT: False,
}

FORFEIT_STATUSES = frozenset(FORFEIT_HOME_WINS)

# Statuses that never contribute to individual player statistics
NO_PLAYER_STATS_STATUSES = FORFEIT_STATUSES | {BYE, ABANDONED}

# Statuses that count toward a team's win/loss record
RECORD_STATUSES = FORFEIT_STATUSES | {COMPLETED}

# Counting fields on a stat record (record attribute -> totals attribute)
STAT_FIELDS = {
    'goals_for': 'goals',
    'goals_against': 'goals_against',
    'missed_goals': 'missed_goals',
    'rebounds': 'rebounds',
    'intercepts': 'intercepts',
    'bad_pass': 'bad_pass',
    'handling_error': 'handling_error',
    'pick_up': 'pick_up',
    'infringement': 'infringement',
}

TOTALS_FIELDS = tuple(STAT_FIELDS.values())

# Game results from a team's perspective
WIN = 'win'
LOSS = 'loss'
DRAW = 'draw'
