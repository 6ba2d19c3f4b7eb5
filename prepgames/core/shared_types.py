"""
Type definitions used across layers
"""

from enum import StrEnum


class GameKind(StrEnum):
    MATCHING = "matching"
    DECIPHER = "decipher"
    FLASHCARDS = "flashcards"


class GuessState(StrEnum):
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"


class LineStatus(StrEnum):
    DEFAULT = "default"
    SUCCESS = "success"
    ERROR = "error"


class Side(StrEnum):
    LEFT = "left"
    RIGHT = "right"


class CardStatus(StrEnum):
    NEW = "new"
    MASTERED = "mastered"
    REVIEW = "review"
