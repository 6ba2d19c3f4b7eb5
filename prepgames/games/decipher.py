"""
Term-guess ("decipher") game: guess a secret health term letter by letter before running out of lives.

One DecipherGame holds the shuffled queue of terms and the session currently being played.
"""

import random
import unicodedata
from dataclasses import dataclass, field
from typing import Optional, Self

from prepgames.core.exceptions import GameStateError
from prepgames.core.models import DecipherGameModel, TermData
from prepgames.core.shared_types import GuessState
from prepgames.games.fallback import terms_or_fallback

MAX_LIVES = 5
ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def normalize_term(term: str) -> str:
    """Uppercase, strip diacritics (decompose + drop combining marks), keep A-Z only. 'Hipertensão' -> 'HIPERTENSAO'"""
    decomposed = unicodedata.normalize("NFD", term.upper())
    return "".join(char for char in decomposed if char in ALPHABET)


def shuffled(terms: list[TermData], rng: random.Random) -> list[TermData]:
    """Fisher-Yates shuffle on a copy."""
    queue = list(terms)
    for i in range(len(queue) - 1, 0, -1):
        j = rng.randint(0, i)
        queue[i], queue[j] = queue[j], queue[i]
    return queue


@dataclass
class DecipherGame:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    category_id: Optional[str]
    pool: list[TermData]
    queue: list[TermData]
    term: str = ""
    hint: str = ""
    definition: str = ""
    guessed_letters: set[str] = field(default_factory=set)
    lives: int = MAX_LIVES
    hints_used: int = 0
    state: GuessState = GuessState.PLAYING
    term_revealed: bool = False
    rng: random.Random = field(default_factory=random.Random)

    @classmethod
    def new_game(
        cls,
        pool: list[TermData],
        category_id: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ) -> Self:
        """Shuffle the pool into a queue and start playing the first term."""
        rng = rng or random.Random()
        # a term without a single letter A-Z could never be guessed
        pool = terms_or_fallback([entry for entry in pool if normalize_term(entry["term"])])
        game = cls(category_id=category_id, pool=pool, queue=[], rng=rng)
        game.start_session(game._pop_next())
        return game

    @classmethod
    def from_model(
        cls, model: DecipherGameModel, rng: Optional[random.Random] = None
    ) -> Self:
        state_name = model.state.upper()
        if state_name not in GuessState.__members__:
            raise GameStateError(
                f"Invalid game state: {model.state!r}. \nPick one from {','.join(state.value for state in GuessState)}"
            )
        return cls(
            category_id=model.category_id,
            pool=model.pool,
            queue=model.queue,
            term=model.term,
            hint=model.hint,
            definition=model.definition,
            guessed_letters=set(model.guessed_letters),
            lives=model.lives,
            hints_used=model.hints_used,
            state=GuessState[state_name],
            term_revealed=model.term_revealed,
            rng=rng or random.Random(),
        )

    def to_model(self) -> DecipherGameModel:
        return DecipherGameModel(
            category_id=self.category_id,
            pool=self.pool,
            queue=self.queue,
            term=self.term,
            hint=self.hint,
            definition=self.definition,
            guessed_letters=sorted(self.guessed_letters),
            lives=self.lives,
            hints_used=self.hints_used,
            state=self.state.value,
            term_revealed=self.term_revealed,
        )

    @property
    def masked_term(self) -> str:
        """What the player sees: guessed letters, '_' for the rest. The full term once the session is over."""
        if self.state != GuessState.PLAYING:
            return self.term
        return "".join(
            char if char in self.guessed_letters else "_" for char in self.term
        )

    @property
    def can_use_hint(self) -> bool:
        return self.state == GuessState.PLAYING and self.lives > 1

    def start_session(self, entry: TermData) -> None:
        self.term = normalize_term(entry["term"])
        self.hint = entry.get("hint", "")
        self.definition = entry.get("definition", "")
        self.guessed_letters = set()
        self.lives = MAX_LIVES
        self.hints_used = 0
        self.state = GuessState.PLAYING
        self.term_revealed = False

    def guess(self, letter: str) -> bool:
        """
        Guess a single letter
        -----

        Ignored (returns False) when the session is over or the letter was guessed before.
        Wrong letter --> one life less, no lives left means the session is lost.
        Right letter --> won once every letter of the term has been guessed.
        """
        letter = letter.upper()
        if self.state != GuessState.PLAYING or letter in self.guessed_letters:
            return False

        self.guessed_letters.add(letter)
        if letter not in self.term:
            self._lose_life()
        else:
            self._check_won()
        return True

    def press_key(self, key: str) -> bool:
        """Physical keyboard: only A-Z count as a guess, everything else (Enter, digits, 'Shift', ...) is ignored."""
        key = key.upper()
        if len(key) != 1 or key not in ALPHABET:
            return False
        return self.guess(key)

    def use_hint(self) -> Optional[str]:
        """
        Reveal one random letter that was not guessed yet. Costs a life.

        Unavailable with a single life left, so a hint can never end the session by itself (but it can win it).
        Returns the revealed letter.
        """
        if not self.can_use_hint:
            return None

        unguessed = sorted(set(self.term) - self.guessed_letters)
        if not unguessed:
            return None

        letter = self.rng.choice(unguessed)
        self.guessed_letters.add(letter)
        self.hints_used += 1
        self._lose_life()
        self._check_won()
        return letter

    def reveal_term(self) -> None:
        """Give up: show the term. Counts as a loss regardless of lives left."""
        if self.state != GuessState.PLAYING:
            return
        self.term_revealed = True
        self.state = GuessState.LOST

    def next_term(self) -> None:
        if self.state == GuessState.PLAYING:
            raise GameStateError("Finish (or reveal) the current term first.")
        self.start_session(self._pop_next())

    @property
    def remaining(self) -> int:
        """Terms left in the queue after the current one."""
        return len(self.queue)

    # -- PRIVATE HELPERS ---
    def _pop_next(self) -> TermData:
        if not self.queue:
            self.queue = shuffled(self.pool, self.rng)
        return self.queue.pop(0)

    def _lose_life(self) -> None:
        self.lives = max(0, self.lives - 1)
        if self.lives == 0:
            self.state = GuessState.LOST

    def _check_won(self) -> None:
        if self.state == GuessState.PLAYING and set(self.term) <= self.guessed_letters:
            self.state = GuessState.WON
