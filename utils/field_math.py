"""
Prime Field Arithmetic over the BN128 Scalar Field
Modular operations used by the Poseidon permutation and the payment circuit
"""

import functools
import logging
import secrets
from typing import Iterable, Tuple

import galois

logger = logging.getLogger(__name__)

# ============================================================================
# FIELD CONSTANTS
# ============================================================================

# BN254 / BN128 scalar field prime
FIELD_SIZE = 21888242871839275222246405745257275088548364400416034343698204186575808495617

# Order of the BN128 base field (used as the curve subgroup order by the protocol)
SUBGROUP_ORDER = 21888242871839275222246405745257275088696311157297823662689037894645226208583

# Multiplicative generator of the scalar field
FIELD_GENERATOR = 5

# ============================================================================
# EXCEPTIONS
# ============================================================================


class FieldError(ValueError):
    """Base exception for field arithmetic"""
    pass


class NoInverseError(FieldError, ZeroDivisionError):
    """Element has no multiplicative inverse"""
    pass


class NoSquareRootError(FieldError):
    """Element is not a quadratic residue"""
    pass


class OutOfFieldError(FieldError):
    """Value lies outside [0, p)"""
    pass


# ============================================================================
# MODULAR OPERATIONS
# ============================================================================


def mod(a: int, m: int = FIELD_SIZE) -> int:
    """Reduce a into [0, m), normalising negative remainders"""
    result = a % m
    return result if result >= 0 else result + m


def add_mod(a: int, b: int, m: int = FIELD_SIZE) -> int:
    return mod(mod(a, m) + mod(b, m), m)


def sub_mod(a: int, b: int, m: int = FIELD_SIZE) -> int:
    return mod(mod(a, m) - mod(b, m), m)


def mul_mod(a: int, b: int, m: int = FIELD_SIZE) -> int:
    return mod(mod(a, m) * mod(b, m), m)


def pow_mod(base: int, exp: int, m: int = FIELD_SIZE) -> int:
    """Square-and-multiply exponentiation, pow_mod(x, 0) == 1"""
    if exp < 0:
        raise FieldError(f"Negative exponent {exp} not supported")
    if exp == 0:
        return 1

    result = 1
    b = mod(base, m)
    # Left-to-right over the bits of exp
    for bit in bin(exp)[2:]:
        result = (result * result) % m
        if bit == '1':
            result = (result * b) % m

    return result


def _extended_gcd(a: int, b: int) -> Tuple[int, int, int]:
    """Iterative extended Euclid: returns (g, x, y) with a*x + b*y == g"""
    old_r, r = a, b
    old_x, x = 1, 0
    old_y, y = 0, 1

    while r != 0:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_x, x = x, old_x - q * x
        old_y, y = y, old_y - q * y

    return old_r, old_x, old_y


def inv_mod(a: int, m: int = FIELD_SIZE) -> int:
    """Multiplicative inverse via the extended Euclidean algorithm"""
    g, x, _ = _extended_gcd(mod(a, m), m)

    if g != 1:
        raise NoInverseError(f"Modular inverse does not exist for {a}")

    return mod(x, m)


def div_mod(a: int, b: int, m: int = FIELD_SIZE) -> int:
    return mul_mod(a, inv_mod(b, m), m)


def is_quadratic_residue(a: int, p: int = FIELD_SIZE) -> bool:
    """Euler's criterion"""
    a = mod(a, p)
    if a == 0:
        return True
    return pow_mod(a, (p - 1) // 2, p) == 1


def sqrt_mod(a: int, p: int = FIELD_SIZE) -> int:
    """Square root for primes p = 3 (mod 4)"""
    if not is_quadratic_residue(a, p):
        raise NoSquareRootError(f"Square root of {a} does not exist in field")

    if p % 4 == 3:
        return pow_mod(a, (p + 1) // 4, p)

    # Tonelli-Shanks is required for p = 1 (mod 4), which includes FIELD_SIZE
    raise NotImplementedError("Square root only implemented for p = 3 (mod 4)")


def random_field_element() -> int:
    """32 random bytes read big-endian and reduced mod p"""
    return mod(int.from_bytes(secrets.token_bytes(32), 'big'))


# ============================================================================
# BYTE CODECS
# ============================================================================


def to_int_le(data: bytes) -> int:
    """Little-endian bytes to integer"""
    return int.from_bytes(bytes(data), 'little')


def from_int_le(value: int, length: int) -> bytes:
    """Integer to exactly `length` little-endian bytes (high bytes truncated)"""
    if value < 0:
        raise FieldError(f"Cannot encode negative value {value}")
    return (value & ((1 << (8 * length)) - 1)).to_bytes(length, 'little')


# ============================================================================
# FIELD MEMBERSHIP
# ============================================================================


def is_in_field(value: int) -> bool:
    return 0 <= value < FIELD_SIZE


def assert_in_field(value: int) -> None:
    if not is_in_field(value):
        raise OutOfFieldError(f"Value {value} is not in the field")


@functools.lru_cache(maxsize=1)
def galois_field():
    """galois prime field over FIELD_SIZE (built once, verification skipped)"""
    logger.debug("Building galois field over BN128 scalar prime")
    return galois.GF(FIELD_SIZE, primitive_element=FIELD_GENERATOR, verify=False)


def field_array(values: Iterable[int]):
    """Reduce values mod p and wrap them as a galois FieldArray"""
    GF = galois_field()
    return GF([mod(int(v)) for v in values])
