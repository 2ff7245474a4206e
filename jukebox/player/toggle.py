# jukebox/player/toggle.py
import time
from enum import Enum
from typing import Callable, Optional


class PlaybackState(str, Enum):
    IDLE = "idle"
    FADING_IN = "fading_in"
    PLAYING = "playing"
    FADING_OUT = "fading_out"
    PAUSED = "paused"


DEBOUNCE_SECONDS = 3.2
FADE_IN_SECONDS = 2.7
FADE_OUT_SECONDS = 3.0


class PlaybackToggle:
    """
    One button (the space bar on the device) toggles play/pause. Each press
    starts a fade and the actual play/pause call happens when the fade ends,
    on the first tick() after its deadline. Presses closer than 3.2s to the
    last accepted one are ignored.
    """

    def __init__(
        self,
        on_play: Callable[[], object],
        on_pause: Callable[[], object],
        clock: Callable[[], float] = time.monotonic,
    ):
        self.on_play = on_play
        self.on_pause = on_pause
        self.clock = clock
        self.state = PlaybackState.IDLE
        self._last_press: Optional[float] = None
        self._deadline: Optional[float] = None

    def press(self) -> PlaybackState:
        now = self.clock()
        self.tick()
        if self._last_press is not None and now - self._last_press < DEBOUNCE_SECONDS:
            return self.state

        if self.state in (PlaybackState.IDLE, PlaybackState.PAUSED):
            self.state = PlaybackState.FADING_IN
            self._deadline = now + FADE_IN_SECONDS
        elif self.state == PlaybackState.PLAYING:
            self.state = PlaybackState.FADING_OUT
            self._deadline = now + FADE_OUT_SECONDS
        else:
            # mid-fade, let it finish
            return self.state

        self._last_press = now
        return self.state

    def tick(self) -> PlaybackState:
        if self._deadline is None or self.clock() < self._deadline:
            return self.state

        self._deadline = None
        if self.state == PlaybackState.FADING_IN:
            self.state = PlaybackState.PLAYING
            self.on_play()
        elif self.state == PlaybackState.FADING_OUT:
            self.state = PlaybackState.PAUSED
            self.on_pause()
        return self.state
