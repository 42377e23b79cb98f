from __future__ import annotations

from statemachine import State, StateMachine

from ghost_typist.api.models import SessionState


class SessionFSM(StateMachine):
    """Lifecycle guard for a typing session.

    idle -> playing -> game_over -> playing (restart) -> ...

    The session owns the game data; the FSM only decides which transitions exist.
    There is no final state: game over waits for the player to start again.
    """

    idle = State(SessionState.idle.value, value=SessionState.idle.value, initial=True)
    playing = State(SessionState.playing.value, value=SessionState.playing.value)
    game_over = State(SessionState.game_over.value, value=SessionState.game_over.value)

    play = idle.to(playing) | game_over.to(playing)
    finish = playing.to(game_over)

    @property
    def session_state(self) -> SessionState:
        return SessionState(str(self.current_state.value))

    def can_play(self) -> bool:
        return self.session_state in (SessionState.idle, SessionState.game_over)

    def can_finish(self) -> bool:
        return self.session_state == SessionState.playing
