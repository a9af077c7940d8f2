"""Dice notation parsing and rolling (``XdY``)."""

from __future__ import annotations

import random
import re
from dataclasses import dataclass

from ..shared.exceptions import ValidationError
from ..shared.messages import ErrorMessages

_DICE_PATTERN = re.compile(r"^(\d+)d(\d+)$", re.IGNORECASE)


@dataclass(frozen=True)
class DiceSpec:
    count: int
    sides: int

    def __str__(self) -> str:
        return f"{self.count}d{self.sides}"


@dataclass(frozen=True)
class DiceRoll:
    spec: DiceSpec
    values: tuple[int, ...]

    @property
    def total(self) -> int:
        return sum(self.values)


def parse_dice(notation: str, *, max_dice: int = 100, max_sides: int = 1000) -> DiceSpec:
    """Parse ``XdY`` and validate it against the configured maxima.

    Raises:
        ValidationError: If the notation is malformed, zero, or over a limit.
    """
    match = _DICE_PATTERN.match(notation.strip())
    if match is None:
        raise ValidationError(ErrorMessages.DICE_INVALID_FORMAT, field="dice")

    count, sides = int(match.group(1)), int(match.group(2))
    if count < 1 or sides < 1:
        raise ValidationError(ErrorMessages.DICE_NOT_POSITIVE, field="dice")
    if count > max_dice:
        raise ValidationError(ErrorMessages.DICE_TOO_MANY.format(max_dice=max_dice), field="dice")
    if sides > max_sides:
        raise ValidationError(
            ErrorMessages.DICE_TOO_MANY_SIDES.format(max_sides=max_sides), field="dice"
        )
    return DiceSpec(count=count, sides=sides)


def roll(spec: DiceSpec, rng: random.Random | None = None) -> DiceRoll:
    rng = rng or random.Random()
    return DiceRoll(spec=spec, values=tuple(rng.randint(1, spec.sides) for _ in range(spec.count)))
