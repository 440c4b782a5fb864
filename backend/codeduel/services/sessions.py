from typing import Callable, List, Optional

from codeduel.state import DuelStore


class SessionDirectory:
    """Maps a connection sid to the room it is bound to.

    Other services ask the directory rather than tracking membership
    themselves. ``teardown`` runs the registered hooks in registration
    order, then forgets the session.
    """

    def __init__(self, store: DuelStore, logger=None):
        self.store = store
        self.logger = logger
        self._teardown_hooks: List[Callable[[str], None]] = []

    def on_teardown(self, hook: Callable[[str], None]) -> None:
        self._teardown_hooks.append(hook)

    def register(self, sid: str) -> None:
        if self.store.add_session(sid) and self.logger:
            self.logger.info(f"[session-register] sid={sid}")

    def is_registered(self, sid: str) -> bool:
        with self.store.atomic() as s:
            return sid in s.sessions

    def room_of(self, sid: str) -> Optional[str]:
        return self.store.room_of(sid)

    def bind(self, sid: str, room_id: str) -> None:
        self.store.set_room(sid, room_id)

    def unbind(self, sid: str) -> None:
        self.store.set_room(sid, None)

    def members_of(self, room_id: str) -> List[str]:
        return self.store.members_of(room_id)

    def teardown(self, sid: str) -> None:
        if not self.is_registered(sid):
            return
        for hook in self._teardown_hooks:
            hook(sid)
        self.store.drop_session(sid)
        if self.logger:
            self.logger.info(f"[session-teardown] sid={sid}")
