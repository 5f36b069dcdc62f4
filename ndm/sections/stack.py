from __future__ import annotations

from typing import Optional

from ndm.errors import StructureError
from ndm.lexical.tokens import ParseToken


class SectionStack:
    """Nesting tracker for Header / Metadata / Data / Segment scopes."""

    def __init__(self):
        self._names: list[str] = []

    def __len__(self) -> int:
        return len(self._names)

    def __bool__(self) -> bool:
        return bool(self._names)

    @property
    def top(self) -> Optional[str]:
        return self._names[-1] if self._names else None

    def push(self, name: str) -> None:
        self._names.append(name)

    def pop(self, name: Optional[str] = None, token: Optional[ParseToken] = None) -> str:
        if not self._names:
            raise StructureError(
                f"closing {name or 'section'} with no open section",
                file_name=token.file_name if token else None,
                line=token.line if token else None,
            )
        if name is not None and self._names[-1] != name:
            raise StructureError(
                f"{name} closes {self._names[-1]}",
                file_name=token.file_name if token else None,
                line=token.line if token else None,
            )
        return self._names.pop()

    def clear(self) -> None:
        self._names.clear()
