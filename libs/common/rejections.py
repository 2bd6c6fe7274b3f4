"""Expected, user-facing outcomes returned as values instead of raised.

Domain code returns a ``Rejection`` when an operation cannot proceed for a
reason the user can act on (not enough points, store closed, ...). Routers
turn it into an ``HTTPException`` with ``raise_for_rejection``.
"""

from dataclasses import dataclass
from typing import ClassVar, NoReturn

from fastapi import HTTPException, status


@dataclass(frozen=True)
class Rejection:
    code: ClassVar[str] = "rejected"
    status_code: ClassVar[int] = status.HTTP_400_BAD_REQUEST

    @property
    def message(self) -> str:
        return self.code.replace("_", " ").capitalize()


def raise_for_rejection(rejection: Rejection) -> NoReturn:
    """Map a rejection onto the HTTP error the API returns for it."""
    raise HTTPException(
        status_code=rejection.status_code,
        detail={"code": rejection.code, "message": rejection.message},
    )
