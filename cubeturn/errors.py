'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Exceptions raised by the move engine.

'''


class CubeError(Exception):
    """Base class for every error raised by cubeturn."""


class InvalidToken(CubeError, ValueError):
    """A move token with an unknown face letter or modifier."""

    def __init__(self, token: str, reason: str = "unrecognized move"):
        self.token = token
        super().__init__(f"{reason}: {token!r}")


class AnimationInProgress(CubeError, RuntimeError):
    """A move (or shuffle) was requested while another one is still running."""
