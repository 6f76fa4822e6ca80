"""
Trigger Effects

The haptic trigger model: ten mutually exclusive effect variants, the
Trigger that pairs an effect with a side, the encoder that renders a
Trigger as a dualsensectl command, and the decoder that rebuilds a Trigger
from the tokens of a command that has already run.

Encoder and decoder are pure functions; neither touches the device.
"""

import logging
import os
import re
from dataclasses import dataclass, field, fields
from typing import ClassVar, Dict, List, Optional, Sequence, Tuple, Type

from .controller_constants import DEFAULT_SIDE, EXECUTABLE, RAW_LENGTH, SIDES, U8_MAX

logger = logging.getLogger(__name__)

# Plain decimal, optional leading '+'. Anything else decodes to 0.
_U8_TOKEN = re.compile(r'\+?[0-9]+')


def _check_u8(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= U8_MAX:
        raise ValueError(f"{name} must be an integer in 0-{U8_MAX}, got {value!r}")
    return value


def parse_u8(token: str) -> int:
    """Parse one command token as an unsigned byte.

    Decoding is lenient: a token that is not a plain decimal number in
    0-255 yields 0 instead of rejecting the command. Raw-array delimiters
    ('[' and ']') written by the encoder are ignored.
    """
    token = token.strip('[]')
    if _U8_TOKEN.fullmatch(token):
        value = int(token)
        if value <= U8_MAX:
            return value
    return 0


# ── Effect variants ──────────────────────────────────────────────


@dataclass(frozen=True)
class TriggerEffect:
    """Base of the closed set of trigger effects.

    Subclasses declare their fields in command-argument order.

    Class attributes:
        keyword: the dualsensectl mode keyword.
        raw_fields: fields holding exactly RAW_LENGTH values.
        limits: UI range per field (inclusive); unlisted fields are 0-255.
        ordered: {field: earlier_field} pairs where field must exceed earlier_field.
    """
    keyword: ClassVar[str] = ''
    raw_fields: ClassVar[Tuple[str, ...]] = ()
    limits: ClassVar[Dict[str, Tuple[int, int]]] = {}
    ordered: ClassVar[Dict[str, str]] = {}

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in self.raw_fields:
                if not isinstance(value, (list, tuple, range)):
                    raise ValueError(
                        f"{f.name} must be a list of {RAW_LENGTH} values, got {value!r}")
                value = tuple(value)
                if len(value) != RAW_LENGTH:
                    raise ValueError(
                        f"{f.name} must have exactly {RAW_LENGTH} values, got {len(value)}")
                for i, item in enumerate(value):
                    _check_u8(f"{f.name}[{i}]", item)
                object.__setattr__(self, f.name, value)
            else:
                _check_u8(f.name, value)

    @property
    def tag(self) -> str:
        """Variant name used in persisted state files."""
        return type(self).__name__

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def min_tokens(cls) -> int:
        """Token count of a full 'trigger <side> <keyword> <args...>' command."""
        count = 3
        for name in cls.field_names():
            count += RAW_LENGTH if name in cls.raw_fields else 1
        return count

    def args(self) -> List[str]:
        """Command arguments in declared field order, raw arrays bracketed."""
        out: List[str] = []
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in self.raw_fields:
                rendered = [str(v) for v in value]
                rendered[0] = '[' + rendered[0]
                rendered[-1] = rendered[-1] + ']'
                out.extend(rendered)
            else:
                out.append(str(value))
        return out

    @classmethod
    def from_tokens(cls, tokens: Sequence[str]) -> 'TriggerEffect':
        """Build the effect from argument tokens (everything after the keyword)."""
        values = {}
        pos = 0
        for name in cls.field_names():
            if name in cls.raw_fields:
                values[name] = tuple(parse_u8(t) for t in tokens[pos:pos + RAW_LENGTH])
                pos += RAW_LENGTH
            else:
                values[name] = parse_u8(tokens[pos])
                pos += 1
        return cls(**values)

    def to_json(self):
        names = self.field_names()
        if not names:
            return self.tag
        payload = {}
        for name in names:
            value = getattr(self, name)
            payload[name] = list(value) if isinstance(value, tuple) else value
        return {self.tag: payload}


@dataclass(frozen=True)
class Off(TriggerEffect):
    keyword: ClassVar[str] = 'off'


@dataclass(frozen=True)
class Feedback(TriggerEffect):
    """Resistance from a position onwards."""
    keyword: ClassVar[str] = 'feedback'
    limits: ClassVar[Dict[str, Tuple[int, int]]] = {'position': (0, 9), 'strength': (1, 8)}

    position: int = 0
    strength: int = 1


@dataclass(frozen=True)
class Weapon(TriggerEffect):
    """Resistance over a range of the trigger course."""
    keyword: ClassVar[str] = 'weapon'
    limits: ClassVar[Dict[str, Tuple[int, int]]] = {
        'start': (2, 7), 'stop': (3, 8), 'strength': (1, 8)}
    ordered: ClassVar[Dict[str, str]] = {'stop': 'start'}

    start: int = 2
    stop: int = 5
    strength: int = 8


@dataclass(frozen=True)
class Bow(TriggerEffect):
    """Resistance over a range with a snap back on release."""
    keyword: ClassVar[str] = 'bow'
    limits: ClassVar[Dict[str, Tuple[int, int]]] = {
        'start': (1, 8), 'stop': (2, 8), 'strength': (1, 8), 'snapforce': (1, 8)}
    ordered: ClassVar[Dict[str, str]] = {'stop': 'start'}

    start: int = 1
    stop: int = 8
    strength: int = 8
    snapforce: int = 8


@dataclass(frozen=True)
class Galloping(TriggerEffect):
    """Two-beat rhythmic pulse."""
    keyword: ClassVar[str] = 'galloping'
    limits: ClassVar[Dict[str, Tuple[int, int]]] = {
        'start': (0, 8), 'stop': (1, 9), 'first_foot': (0, 6),
        'second_foot': (1, 7), 'frequency': (1, U8_MAX)}
    ordered: ClassVar[Dict[str, str]] = {'stop': 'start', 'second_foot': 'first_foot'}

    start: int = 0
    stop: int = 9
    first_foot: int = 1
    second_foot: int = 3
    frequency: int = 1


@dataclass(frozen=True)
class Machine(TriggerEffect):
    """Alternating strong and weak pulses."""
    keyword: ClassVar[str] = 'machine'
    limits: ClassVar[Dict[str, Tuple[int, int]]] = {
        'start': (1, 8), 'stop': (2, 9), 'strength_a': (0, 7), 'strength_b': (0, 7),
        'frequency': (1, U8_MAX), 'period': (0, U8_MAX)}
    ordered: ClassVar[Dict[str, str]] = {'stop': 'start'}

    start: int = 1
    stop: int = 9
    strength_a: int = 7
    strength_b: int = 7
    frequency: int = 9
    period: int = 1


@dataclass(frozen=True)
class Vibration(TriggerEffect):
    """Vibration from a position onwards."""
    keyword: ClassVar[str] = 'vibration'
    limits: ClassVar[Dict[str, Tuple[int, int]]] = {
        'position': (0, 9), 'amplitude': (1, 8), 'frequency': (1, U8_MAX)}

    position: int = 1
    amplitude: int = 8
    frequency: int = 60


@dataclass(frozen=True)
class FeedbackRaw(TriggerEffect):
    """Resistance per trigger decile."""
    keyword: ClassVar[str] = 'feedback-raw'
    raw_fields: ClassVar[Tuple[str, ...]] = ('strength',)
    limits: ClassVar[Dict[str, Tuple[int, int]]] = {'strength': (0, 8)}

    strength: Tuple[int, ...] = (0,) * RAW_LENGTH


@dataclass(frozen=True)
class VibrationRaw(TriggerEffect):
    """Vibration amplitude per trigger decile at one frequency."""
    keyword: ClassVar[str] = 'vibration-raw'
    raw_fields: ClassVar[Tuple[str, ...]] = ('amplitude',)

    amplitude: Tuple[int, ...] = (0,) * RAW_LENGTH
    frequency: int = 100


@dataclass(frozen=True)
class Mode(TriggerEffect):
    """Free-form parameters passed through to 'trigger <side> mode'."""
    keyword: ClassVar[str] = 'mode'

    params: Tuple[str, ...] = ()

    def __post_init__(self):
        params = self.params
        if isinstance(params, str):
            params = params.split()
        elif not isinstance(params, (list, tuple)):
            raise ValueError(f"mode params must be a list of strings, got {params!r}")
        params = tuple(params)
        for p in params:
            if not isinstance(p, str):
                raise ValueError(f"mode params must be strings, got {p!r}")
        object.__setattr__(self, 'params', params)

    @classmethod
    def min_tokens(cls) -> int:
        return 3

    def args(self) -> List[str]:
        return list(self.params)

    @classmethod
    def from_tokens(cls, tokens: Sequence[str]) -> 'Mode':
        return cls(params=tuple(tokens))


EFFECT_TYPES: Tuple[Type[TriggerEffect], ...] = (
    Off, Feedback, Weapon, Bow, Galloping, Machine, Vibration,
    FeedbackRaw, VibrationRaw, Mode,
)
EFFECTS_BY_KEYWORD: Dict[str, Type[TriggerEffect]] = {t.keyword: t for t in EFFECT_TYPES}
EFFECTS_BY_TAG: Dict[str, Type[TriggerEffect]] = {t.__name__: t for t in EFFECT_TYPES}


def effect_from_json(data) -> TriggerEffect:
    """Parse an externally-tagged effect ("Off" or {"Feedback": {...}}).

    Raises ValueError on anything malformed.
    """
    if isinstance(data, str):
        tag, payload = data, {}
    elif isinstance(data, dict) and len(data) == 1:
        tag, payload = next(iter(data.items()))
        if payload is None:
            payload = {}
    else:
        raise ValueError(f"Malformed trigger effect: {data!r}")

    effect_type = EFFECTS_BY_TAG.get(tag)
    if effect_type is None:
        raise ValueError(f"Unknown trigger effect: {tag!r}")
    if not isinstance(payload, dict):
        raise ValueError(f"Malformed {tag} parameters: {payload!r}")
    if set(payload) != set(effect_type.field_names()):
        raise ValueError(
            f"{tag} expects fields {effect_type.field_names()}, got {sorted(payload)}")
    if effect_type is Mode and not isinstance(payload['params'], list):
        raise ValueError(f"Mode params must be a list, got {payload['params']!r}")
    return effect_type(**payload)


def validate_effect(effect: TriggerEffect) -> List[str]:
    """Check an effect against the ranges the controller actually honours.

    Returns a list of problems; an empty list means the effect is in range.
    """
    problems = []
    for f in fields(effect):
        value = getattr(effect, f.name)
        if f.name in effect.raw_fields:
            values = list(enumerate(value))
        elif isinstance(value, int):
            values = [(None, value)]
        else:
            continue
        lo, hi = effect.limits.get(f.name, (0, U8_MAX))
        for index, item in values:
            if not lo <= item <= hi:
                label = f.name if index is None else f"{f.name}[{index}]"
                problems.append(f"{label} must be between {lo} and {hi}")
    for later, earlier in effect.ordered.items():
        if getattr(effect, later) <= getattr(effect, earlier):
            problems.append(f"{later} must be greater than {earlier}")
    return problems


# ── Trigger ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Trigger:
    """An effect applied to the left, right or both triggers."""
    side: str = DEFAULT_SIDE
    effect: TriggerEffect = field(default_factory=Off)

    def __post_init__(self):
        if self.side not in SIDES:
            raise ValueError(f"side must be one of {SIDES}, got {self.side!r}")
        if not isinstance(self.effect, TriggerEffect):
            raise ValueError(f"effect must be a TriggerEffect, got {self.effect!r}")

    def to_args(self) -> List[str]:
        return ['trigger', self.side, self.effect.keyword, *self.effect.args()]

    def to_command(self) -> str:
        return ' '.join(self.to_args())

    def to_json(self) -> dict:
        return {'side': self.side, 'effect': self.effect.to_json()}

    @classmethod
    def from_json(cls, data) -> 'Trigger':
        if not isinstance(data, dict) or set(data) != {'side', 'effect'}:
            raise ValueError(f"Malformed trigger: {data!r}")
        return cls(side=data['side'], effect=effect_from_json(data['effect']))


def encode_trigger(trigger: Trigger) -> str:
    """Render a Trigger as 'trigger <side> <keyword> <args...>'."""
    return trigger.to_command()


def decode_trigger(tokens: Sequence[str]) -> Optional[Trigger]:
    """Rebuild the Trigger that a successfully executed command applied.

    Accepts the whitespace-split command with or without the leading
    executable name. Returns None (and logs) when the command is not a
    supported trigger command or has too few tokens for its mode.
    """
    parts = list(tokens)
    if parts and os.path.basename(parts[0]) == EXECUTABLE:
        parts = parts[1:]

    effect_type = None
    if len(parts) >= 3 and parts[0] == 'trigger' and parts[1] in SIDES:
        effect_type = EFFECTS_BY_KEYWORD.get(parts[2])

    if effect_type is None or len(parts) < effect_type.min_tokens():
        logger.error("Unsupported trigger command: %s", ' '.join(tokens))
        return None

    return Trigger(side=parts[1], effect=effect_type.from_tokens(parts[3:]))
