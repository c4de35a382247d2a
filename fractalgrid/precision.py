"""Named numeric precisions used for all coordinate and orbit arithmetic.

A precision is picked once per run and threaded through the mapper and the
sampler; neither of them branches on it.  Values should be converted from
their decimal text where that text is available so the wider types keep
every digit the user typed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple

import numpy as np
from mpmath.ctx_mp import MPContext

from fractalgrid.errors import InvalidPrecision

QUAD_MANTISSA_BITS = 113

# Private context so the global mpmath.mp precision is never touched.
_QUAD = MPContext()
_QUAD.prec = QUAD_MANTISSA_BITS

@dataclass(frozen=True)
class Precision:
    name: str
    digits: int
    mantissa_bits: int
    convert: Callable[[Any], Any]
    format: Callable[[Any], str]
    pack: Callable[[Any], Any]
    unpack: Callable[[Any], Any]

    def describe(self) -> Dict[str, Any]:
        return {"name": self.name, "digits": self.digits, "mantissa_bits": self.mantissa_bits}

def _identity(value: Any) -> Any:
    return value

def _format_standard(value: Any) -> str:
    return "%.17g" % value

def _format_extended(value: Any) -> str:
    v = np.longdouble(value)
    if v != 0 and abs(v) < np.longdouble("1e-4"):
        return np.format_float_scientific(v, precision=20, unique=False, trim="-")
    return np.format_float_positional(v, precision=21, unique=False, fractional=False, trim="-")

def _convert_quad(value: Any) -> Any:
    if isinstance(value, np.floating):
        value = str(value)
    return _QUAD.mpf(value)

def _format_quad(value: Any) -> str:
    return _QUAD.nstr(_QUAD.mpf(value), 36)

def _pack_quad(value: Any) -> Tuple:
    return _QUAD.mpf(value)._mpf_

def _unpack_quad(packed: Tuple) -> Any:
    return _QUAD.make_mpf(packed)

STANDARD = Precision(
    name="standard",
    digits=17,
    mantissa_bits=53,
    convert=float,
    format=_format_standard,
    pack=_identity,
    unpack=_identity,
)

EXTENDED = Precision(
    name="extended",
    digits=21,
    mantissa_bits=int(np.finfo(np.longdouble).nmant) + 1,
    convert=np.longdouble,
    format=_format_extended,
    pack=_identity,
    unpack=_identity,
)

QUAD = Precision(
    name="quad",
    digits=36,
    mantissa_bits=QUAD_MANTISSA_BITS,
    convert=_convert_quad,
    format=_format_quad,
    pack=_pack_quad,
    unpack=_unpack_quad,
)

PRECISIONS: Dict[str, Precision] = {p.name: p for p in (STANDARD, EXTENDED, QUAD)}

def get_precision(name: str) -> Precision:
    try:
        return PRECISIONS[str(name).strip().lower()]
    except KeyError:
        raise InvalidPrecision(
            f"Unknown precision {name!r}; choose one of: {', '.join(PRECISIONS)}"
        ) from None

def extended_is_wider() -> bool:
    """True when the platform's long double carries more bits than a double."""
    return np.finfo(np.longdouble).eps < np.finfo(np.float64).eps
