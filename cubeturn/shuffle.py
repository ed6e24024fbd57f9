'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Shuffle driver: issues random (or given) moves one after the other,
each one only after the previous animation has been committed.

'''
from __future__ import annotations

import logging
import random
from concurrent.futures import Future
from typing import Iterable, List, Optional

from cubeturn.errors import AnimationInProgress
from cubeturn.moves import FACES, MODIFIERS, parse_sequence

logger = logging.getLogger(__name__)


class ShuffleDriver:
    """
    Sequential move driver on top of a RotationAnimator.

    Nothing blocks: the next move is issued from the completion callback of
    the previous one, so progress happens entirely inside frame callbacks.

    Parameters
    ----------
    animator : RotationAnimator
        Runs each move; its cube records the moves with phase "shuffle".
    seed : int, optional
        Seed for the move generator. Same seed, same tokens.
    rng : random.Random, optional
        Explicit random source (takes precedence over `seed`).
    """

    def __init__(self, animator, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self.animator = animator
        self.rng = rng or random.Random(seed)
        self.issued: List[str] = []
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def random_move(self) -> str:
        """One of the 18 tokens, face and modifier drawn uniformly."""
        return self.rng.choice(FACES) + self.rng.choice(MODIFIERS)

    def shuffle(self, n: int) -> Future:
        """
        Issue `n` random moves strictly one after another.

        No filtering is done: a move may undo the previous one.

        Returns:
            Future resolved with the list of tokens once the last move is committed.
        """
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")
        logger.info("Shuffling with %d moves", n)
        return self._run((self.random_move() for _ in range(n)), n, phase="shuffle")

    def play(self, moves: Iterable[str] | str) -> Future:
        """Run a fixed sequence ("R U R' U'" or a list of tokens) the same way."""
        tokens = parse_sequence(moves) if isinstance(moves, str) else parse_sequence(" ".join(moves))
        logger.info("Playing %d moves", len(tokens))
        return self._run(iter(tokens), len(tokens), phase="manual")

    def _run(self, tokens, total: int, phase: str) -> Future:
        if self._running or self.animator.busy:
            raise AnimationInProgress("a move sequence is already running")

        cube = self.animator.cube
        finished: Future = Future()
        finished.set_running_or_notify_cancel()
        played: List[str] = []
        prev_phase = cube.phase
        # commits land in later frames, so the phase is held for the whole run
        cube.phase = phase
        self._running = True

        def stop() -> None:
            cube.phase = prev_phase
            self._running = False

        def finish() -> None:
            stop()
            logger.info("Sequence finished after %d moves", len(played))
            finished.set_result(played)

        def issue_next(_previous: Optional[Future] = None) -> None:
            # runs as a Future callback, where a raised error would only be logged
            try:
                token = next(tokens, None)
                if token is None:
                    finish()
                    return
                played.append(token)
                self.issued.append(token)
                pending = self.animator.animate_move(token)
            except Exception as exc:
                stop()
                logger.error("Sequence aborted after %d moves: %s", len(played), exc)
                finished.set_exception(exc)
                return
            pending.add_done_callback(issue_next)

        if total == 0:
            finish()
        else:
            issue_next()
        return finished
