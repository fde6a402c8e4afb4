from .agent import MODE_TIME, MODE_WORDS, RaceAgent, TrailMarks
from .transport import SocketRaceClient

__all__ = ['MODE_TIME', 'MODE_WORDS', 'RaceAgent', 'TrailMarks', 'SocketRaceClient']
