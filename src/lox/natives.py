"""Host functions installed into every fresh global frame."""
from __future__ import annotations

import time

from .environment import Environment
from .values import NativeFunction


#wall-clock seconds as a float, for timing scripts
def _clock() -> float:
    return time.time()


NATIVES = (NativeFunction("clock", 0, _clock),)


def define_natives(environment: Environment) -> None:
    for native in NATIVES:
        environment.define(native.name, native)


__all__ = ["NATIVES", "define_natives"]
