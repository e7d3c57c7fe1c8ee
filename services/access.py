from typing import Iterable, Union

from core.errors import AuthorizationError

Identity = Union[int, str]


class AccessGate:
    def __init__(self, allowed: Iterable[Identity]) -> None:
        self._allowed = frozenset(str(x).strip() for x in allowed)

    def is_authorized(self, identity: Identity) -> bool:
        return str(identity) in self._allowed

    def require(self, identity: Identity) -> None:
        if not self.is_authorized(identity):
            raise AuthorizationError("access denied")
