from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Literal:
    """Text copied to the output as-is."""

    text: str


@dataclass(frozen=True)
class Logic:
    """Text between an open and a close tag."""

    text: str

    @property
    def is_output(self) -> bool:
        """True for output expressions: a single leading ``=``, not ``==``."""
        stripped = self.text.strip()
        return stripped.startswith("=") and not stripped.startswith("==")


Segment = Union[Literal, Logic]
