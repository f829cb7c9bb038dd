"""Resumable CRC calculation, in software or on a simulated CRC accelerator."""

from __future__ import annotations

import argparse
import enum
import threading
from dataclasses import dataclass
from typing import Optional, Sequence

_DEFAULT_DATA = b"123456789"
_ACCELERATOR_LOCK = threading.Lock()
_ACCELERATOR_LOCK_TIMEOUT = 0.5


@dataclass(frozen=True)
class Algorithm:
    """Parameters of a CRC algorithm in the usual catalogue form."""

    width: int
    poly: int
    init: int
    refin: bool
    refout: bool
    xorout: int
    check: int
    residue: int
    name: str = ""

    @property
    def mask(self) -> int:
        return (1 << self.width) - 1


class CrcErrorKind(enum.Enum):
    UNKNOWN = "unknown CRC error"
    WIDTH = "unsupported CRC width"
    POLYNOMIAL = "unsupported CRC polynomial"
    XOR_OUT = "unsupported CRC output xor value"
    MUTEX_GET = "timed out waiting for the CRC engine"


class CrcError(Exception):
    """A CRC calculation could not be carried out."""

    def __init__(self, kind: CrcErrorKind = CrcErrorKind.UNKNOWN) -> None:
        super().__init__(kind.value)
        self.kind = kind


class Polynomial(enum.Enum):
    """Polynomials the CRC accelerator supports."""

    CRC_CCITT = 0x1021
    CRC16 = 0x8005
    CRC32 = 0x04C11DB7

    @property
    def width(self) -> int:
        return 32 if self is Polynomial.CRC32 else 16


class Engine(enum.Enum):
    """Where a CRC is computed."""

    SOFTWARE = "software"
    ACCELERATOR = "accelerator"


def _reflect(value: int, bits: int) -> int:
    return int(format(value, f"0{bits}b")[::-1], 2)


def crc_calculate(init: int, algorithm: Algorithm, data: bytes) -> int:
    """Compute the finalized CRC of data, starting from an unreflected register value."""
    mask = algorithm.mask
    top = algorithm.width - 1
    register = init & mask
    for byte in data:
        if algorithm.refin:
            byte = _reflect(byte, 8)
        for shift in range(7, -1, -1):
            feedback = ((register >> top) ^ (byte >> shift)) & 1
            register = (register << 1) & mask
            if feedback:
                register ^= algorithm.poly
    if algorithm.refout:
        register = _reflect(register, algorithm.width)
    return (register ^ algorithm.xorout) & mask


def _check_word_bits(word_bits: int) -> None:
    if word_bits not in (16, 32):
        raise ValueError(f"word size must be 16 or 32 bits, not {word_bits}")


def accelerator_polynomial(algorithm: Algorithm, word_bits: int = 32) -> Polynomial:
    """Map an algorithm onto an accelerator polynomial, or raise CrcError."""
    _check_word_bits(word_bits)
    if algorithm.width == 16:
        if algorithm.xorout not in (0, 0xFFFF):
            raise CrcError(CrcErrorKind.XOR_OUT)
        if algorithm.poly == Polynomial.CRC_CCITT.value:
            return Polynomial.CRC_CCITT
        if algorithm.poly == Polynomial.CRC16.value:
            return Polynomial.CRC16
        raise CrcError(CrcErrorKind.POLYNOMIAL)
    if word_bits == 32 and algorithm.width == 32:
        if algorithm.xorout not in (0, 0xFFFFFFFF):
            raise CrcError(CrcErrorKind.XOR_OUT)
        if algorithm.poly == Polynomial.CRC32.value:
            return Polynomial.CRC32
        raise CrcError(CrcErrorKind.POLYNOMIAL)
    raise CrcError(CrcErrorKind.WIDTH)


def _accelerated_calculate(init: int, algorithm: Algorithm, data: bytes, word_bits: int) -> int:
    polynomial = accelerator_polynomial(algorithm, word_bits)
    if not _ACCELERATOR_LOCK.acquire(timeout=_ACCELERATOR_LOCK_TIMEOUT):
        raise CrcError(CrcErrorKind.MUTEX_GET)
    try:
        complement_out = algorithm.xorout in (0xFFFF, 0xFFFFFFFF)
        hardware = Algorithm(
            width=polynomial.width,
            poly=polynomial.value,
            init=init,
            refin=algorithm.refin,
            refout=algorithm.refout,
            xorout=(1 << polynomial.width) - 1 if complement_out else 0,
            check=0,
            residue=0,
            name="accelerator",
        )
        result = crc_calculate(init, hardware, data)
    finally:
        _ACCELERATOR_LOCK.release()
    return result & ((1 << word_bits) - 1)


class EmbeddedCrc:
    """A CRC that can be fed in several pieces and gives the same result as one pass."""

    def __init__(self, algorithm: Algorithm, word_bits: int = 32, engine: Engine = Engine.SOFTWARE) -> None:
        _check_word_bits(word_bits)
        if not 0 < algorithm.width <= word_bits:
            raise ValueError(f"a {algorithm.width}-bit CRC does not fit a {word_bits}-bit word")
        self.algorithm = algorithm
        self.word_bits = word_bits
        self.engine = engine
        self._current: Optional[int] = None

    def calculate(self, data: bytes) -> int:
        """Feed data and return the CRC of everything fed so far.

        A failed calculation leaves the stored CRC untouched, so it can be retried.
        """
        if self._current is None:
            initial = self.algorithm.init
        else:
            initial = self._un_finalize(self._current)
        if self.engine is Engine.ACCELERATOR:
            result = _accelerated_calculate(initial, self.algorithm, data, self.word_bits)
        else:
            result = crc_calculate(initial, self.algorithm, data)
        self._current = result
        return result

    def read_crc(self) -> int:
        """The last computed CRC, or the algorithm's initial value if none yet."""
        return self.algorithm.init if self._current is None else self._current

    def _un_finalize(self, crc: int) -> int:
        word_mask = (1 << self.word_bits) - 1
        out = (crc ^ self.algorithm.xorout) & word_mask
        if self.algorithm.refout:
            out = (out << (self.word_bits - self.algorithm.width)) & word_mask
            out = _reflect(out, self.word_bits)
        return out


@dataclass
class AlgorithmCheck:
    """Outcome of checking an algorithm against its catalogue check value."""

    name: str
    word_bits: int
    expected: int
    oneshot: Optional[int] = None
    split: Optional[int] = None
    error: Optional[CrcError] = None

    @property
    def passed(self) -> bool:
        return self.error is None and self.oneshot == self.expected and self.split == self.expected


def check_algorithm(
    algorithm: Algorithm,
    word_bits: int = 32,
    engine: Engine = Engine.SOFTWARE,
    data: bytes = _DEFAULT_DATA,
) -> AlgorithmCheck:
    """Compute the CRC of data in one pass and in two halves."""
    result = AlgorithmCheck(algorithm.name, word_bits, algorithm.check)
    try:
        result.oneshot = EmbeddedCrc(algorithm, word_bits, engine).calculate(data)
        handle = EmbeddedCrc(algorithm, word_bits, engine)
        half = len(data) // 2
        handle.calculate(data[:half])
        result.split = handle.calculate(data[half:])
    except CrcError as exc:
        result.error = exc
    return result


def _alg(name, width, poly, init, refin, refout, xorout, check, residue) -> Algorithm:
    return Algorithm(width, poly, init, refin, refout, xorout, check, residue, name)


CRC_32_MPEG_2 = _alg("CRC_32_MPEG_2", 32, 0x04C11DB7, 0xFFFFFFFF, False, False, 0, 0x0376E6E7, 0)
CRC_32_CKSUM = _alg("CRC_32_CKSUM", 32, 0x04C11DB7, 0, False, False, 0xFFFFFFFF, 0x765E7680, 0xC704DD7B)
CRC_32_BZIP2 = _alg("CRC_32_BZIP2", 32, 0x04C11DB7, 0xFFFFFFFF, False, False, 0xFFFFFFFF, 0xFC891918, 0xC704DD7B)
CRC_32_ISO_HDLC = _alg("CRC_32_ISO_HDLC", 32, 0x04C11DB7, 0xFFFFFFFF, True, True, 0xFFFFFFFF, 0xCBF43926, 0xDEBB20E3)
CRC_32_JAMCRC = _alg("CRC_32_JAMCRC", 32, 0x04C11DB7, 0xFFFFFFFF, True, True, 0, 0x340BC6D9, 0)
CRC_32_AUTOSAR = _alg("CRC_32_AUTOSAR", 32, 0xF4ACFB13, 0xFFFFFFFF, True, True, 0xFFFFFFFF, 0x1697D06A, 0x904CDDBF)
CRC_32_ISCSI = _alg("CRC_32_ISCSI", 32, 0x1EDC6F41, 0xFFFFFFFF, True, True, 0xFFFFFFFF, 0xE3069283, 0xB798B438)
CRC_31_PHILIPS = _alg("CRC_31_PHILIPS", 31, 0x04C11DB7, 0x7FFFFFFF, False, False, 0x7FFFFFFF, 0x0CE9E46C, 0x4EAF26F1)
CRC_21_CAN_FD = _alg("CRC_21_CAN_FD", 21, 0x102899, 0, False, False, 0, 0x0ED841, 0)
CRC_17_CAN_FD = _alg("CRC_17_CAN_FD", 17, 0x1685B, 0, False, False, 0, 0x04F03, 0)

CRC_16_ARC = _alg("CRC_16_ARC", 16, 0x8005, 0, True, True, 0, 0xBB3D, 0)
CRC_16_CMS = _alg("CRC_16_CMS", 16, 0x8005, 0xFFFF, False, False, 0, 0xAEE7, 0)
CRC_16_DDS_110 = _alg("CRC_16_DDS_110", 16, 0x8005, 0x800D, False, False, 0, 0x9ECF, 0)
CRC_16_MAXIM_DOW = _alg("CRC_16_MAXIM_DOW", 16, 0x8005, 0, True, True, 0xFFFF, 0x44C2, 0xB001)
CRC_16_MODBUS = _alg("CRC_16_MODBUS", 16, 0x8005, 0xFFFF, True, True, 0, 0x4B37, 0)
CRC_16_UMTS = _alg("CRC_16_UMTS", 16, 0x8005, 0, False, False, 0, 0xFEE8, 0)
CRC_16_USB = _alg("CRC_16_USB", 16, 0x8005, 0xFFFF, True, True, 0xFFFF, 0xB4C8, 0xB001)
CRC_16_GENIBUS = _alg("CRC_16_GENIBUS", 16, 0x1021, 0xFFFF, False, False, 0xFFFF, 0xD64E, 0x1D0F)
CRC_16_GSM = _alg("CRC_16_GSM", 16, 0x1021, 0, False, False, 0xFFFF, 0xCE3C, 0x1D0F)
CRC_16_IBM_3740 = _alg("CRC_16_IBM_3740", 16, 0x1021, 0xFFFF, False, False, 0, 0x29B1, 0)
CRC_16_IBM_SDLC = _alg("CRC_16_IBM_SDLC", 16, 0x1021, 0xFFFF, True, True, 0xFFFF, 0x906E, 0xF0B8)
CRC_16_ISO_IEC_14443_3_A = _alg("CRC_16_ISO_IEC_14443_3_A", 16, 0x1021, 0xC6C6, True, True, 0, 0xBF05, 0)
CRC_16_KERMIT = _alg("CRC_16_KERMIT", 16, 0x1021, 0, True, True, 0, 0x2189, 0)
CRC_16_MCRF4XX = _alg("CRC_16_MCRF4XX", 16, 0x1021, 0xFFFF, True, True, 0, 0x6F91, 0)
CRC_16_RIELLO = _alg("CRC_16_RIELLO", 16, 0x1021, 0xB2AA, True, True, 0, 0x63D0, 0)
CRC_16_SPI_FUJITSU = _alg("CRC_16_SPI_FUJITSU", 16, 0x1021, 0x1D0F, False, False, 0, 0xE5CC, 0)
CRC_16_TMS37157 = _alg("CRC_16_TMS37157", 16, 0x1021, 0x89EC, True, True, 0, 0x26B1, 0)
CRC_16_XMODEM = _alg("CRC_16_XMODEM", 16, 0x1021, 0, False, False, 0, 0x31C3, 0)
CRC_12_GSM = _alg("CRC_12_GSM", 12, 0xD31, 0, False, False, 0xFFF, 0xB34, 0x178)
CRC_11_FLEXRAY = _alg("CRC_11_FLEXRAY", 11, 0x385, 0x01A, False, False, 0, 0x5A3, 0)

_SUPPORTED = [
    (CRC_32_MPEG_2, 32),
    (CRC_32_CKSUM, 32),
    (CRC_32_BZIP2, 32),
    (CRC_32_ISO_HDLC, 32),
    (CRC_32_JAMCRC, 32),
    *[
        (algorithm, 16)
        for algorithm in (
            CRC_16_ARC, CRC_16_CMS, CRC_16_DDS_110, CRC_16_MAXIM_DOW, CRC_16_MODBUS,
            CRC_16_UMTS, CRC_16_USB, CRC_16_GENIBUS, CRC_16_GSM, CRC_16_IBM_3740,
            CRC_16_IBM_SDLC, CRC_16_ISO_IEC_14443_3_A, CRC_16_KERMIT, CRC_16_MCRF4XX,
            CRC_16_RIELLO, CRC_16_SPI_FUJITSU, CRC_16_TMS37157, CRC_16_XMODEM,
        )
    ],
    (CRC_16_XMODEM, 32),
    (CRC_16_IBM_SDLC, 32),
]

_UNSUPPORTED_ON_ACCELERATOR = [
    (CRC_31_PHILIPS, 32),
    (CRC_32_AUTOSAR, 32),
    (CRC_32_ISCSI, 32),
    (CRC_17_CAN_FD, 32),
    (CRC_21_CAN_FD, 32),
    (CRC_11_FLEXRAY, 16),
    (CRC_12_GSM, 16),
]


def _report(check: AlgorithmCheck, algorithm: Algorithm) -> str:
    digits = check.word_bits // 4
    label = f"{check.name}{'_AS_U32' if algorithm.width == 16 and check.word_bits == 32 else ''}"
    lines = [
        f"--------------- {label} ---------------",
        f"init: 0x{algorithm.init:X}, refin: {algorithm.refin}, refout: {algorithm.refout}, "
        f"xorout: 0x{algorithm.xorout:X}",
        f"Expected CRC: 0x{check.expected:0{digits}X}",
    ]
    if check.oneshot is None:
        lines.append(f"Error calculating CRC for {label}: {check.error}")
        return "\n".join(lines)
    if check.oneshot == check.expected:
        lines.append(f"Algorithm check passed (CRC = 0x{check.oneshot:0{digits}X})")
    else:
        lines.append(
            f"ALGORITHM CHECK FAILED (CRC: 0x{check.oneshot:0{digits}X}, "
            f"Expected = 0x{check.expected:0{digits}X})"
        )
    if check.split is None:
        lines.append(f"Error calculating CRC for {label}: {check.error}")
    elif check.split == check.expected:
        lines.append(f"Split calculation test passed (CRC = 0x{check.split:0{digits}X})")
    else:
        lines.append(
            f"RESUME TEST FAILED (Oneshot CRC = 0x{check.oneshot:0{digits}X}, "
            f"Two shot CRC = 0x{check.split:0{digits}X}, Expected CRC = 0x{check.expected:0{digits}X})"
        )
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the catalogue of algorithms through the chosen engine and report."""
    parser = argparse.ArgumentParser(description="Check CRC algorithms in one and two passes.")
    parser.add_argument("--engine", choices=[engine.value for engine in Engine], default=Engine.SOFTWARE.value)
    args = parser.parse_args(argv)
    engine = Engine(args.engine)

    for algorithm, word_bits in _SUPPORTED:
        print(_report(check_algorithm(algorithm, word_bits, engine), algorithm))
    print("--------EXPECT FAILURE FOR THE FOLLOWING ALGORITHMS ON THE ACCELERATOR--------")
    for algorithm, word_bits in _UNSUPPORTED_ON_ACCELERATOR:
        print(_report(check_algorithm(algorithm, word_bits, engine), algorithm))
    return 0