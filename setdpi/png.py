import math
import struct
from dataclasses import dataclass
from typing import Optional

from . import crc


PNG_SIGNATURE = bytes([137, 80, 78, 71, 13, 10, 26, 10])

PHYS = b'pHYs'
IDAT = b'IDAT'
IEND = b'IEND'

PHYS_DATA_LENGTH = 9
# length(4) + type(4) + data(9) + crc(4)
PHYS_CHUNK_SIZE = 4 + 4 + PHYS_DATA_LENGTH + 4

UNIT_METRE = 1
METRES_PER_INCH = 0.0254
UINT32_MAX = 0xFFFFFFFF


class PngError(Exception):
    """PNG 버퍼를 처리할 수 없을 때 발생하는 오류"""
    pass


class MalformedPngError(PngError, ValueError):
    """시그니처나 청크 길이가 올바르지 않은 버퍼"""
    pass


class MissingImageDataError(PngError):
    """IDAT 청크가 없어 pHYs 청크를 삽입할 위치를 정할 수 없음"""
    pass


class ResolutionOverflowError(PngError, OverflowError):
    """PPI 값을 부호 없는 32비트 PPM으로 표현할 수 없음"""
    pass


@dataclass(frozen=True)
class Resolution:
    """pHYs 청크에 기록된 해상도 (단위: 미터당 픽셀)"""
    ppm_x: int
    ppm_y: int
    unit: int = UNIT_METRE

    @property
    def ppi_x(self) -> float:
        return ppm_to_ppi(self.ppm_x)

    @property
    def ppi_y(self) -> float:
        return ppm_to_ppi(self.ppm_y)


def ppm_to_ppi(ppm: int) -> float:
    """미터당 픽셀을 인치당 픽셀로 변환합니다."""
    return ppm * METRES_PER_INCH


def ppi_to_ppm(ppi: float) -> int:
    """인치당 픽셀을 미터당 픽셀로 변환합니다 (가장 가까운 정수로 반올림)."""
    if not math.isfinite(ppi):
        raise ResolutionOverflowError(f"PPI 값이 유한하지 않습니다: {ppi}")

    ppm = round(ppi / METRES_PER_INCH)
    if ppm < 0 or ppm > UINT32_MAX:
        raise ResolutionOverflowError(f"PPI {ppi}는 32비트 PPM 범위를 벗어납니다")
    return ppm


def locate_chunk(buffer: bytes, tag, precedes_idat: bool = False) -> Optional[int]:
    """청크 타입 필드의 위치(길이 필드가 아님)를 반환합니다.

    Args:
        buffer: PNG 이미지의 바이트 데이터
        tag: 4바이트 청크 타입 (예: "pHYs")
        precedes_idat: True이면 첫 IDAT 청크보다 앞에 있는 청크만 찾습니다

    Returns:
        청크 타입의 오프셋, 찾지 못하면 None
    """
    if isinstance(tag, str):
        try:
            tag = tag.encode('ascii')
        except UnicodeEncodeError:
            return None

    if len(tag) != 4 or len(buffer) < len(PNG_SIGNATURE):
        return None

    # 시그니처 바로 뒤부터 청크 길이를 읽으며 다음 청크로 건너뜁니다
    pos = len(PNG_SIGNATURE)
    while pos + 8 <= len(buffer):
        length = struct.unpack('>I', buffer[pos:pos + 4])[0]
        chunk_type = bytes(buffer[pos + 4:pos + 8])

        if chunk_type == tag:
            # 길이 필드가 시그니처와 겹치면 안 됩니다
            return pos + 4 if pos + 4 >= 12 else None

        if precedes_idat and chunk_type == IDAT:
            return None
        if chunk_type == IEND:
            return None

        end = pos + 8 + length + 4
        if end > len(buffer):
            raise MalformedPngError(
                f"{chunk_type!r} 청크(오프셋 {pos})가 버퍼 끝을 넘어갑니다"
            )
        pos = end

    return None


def decode_resolution(buffer: bytes, offset: int) -> Optional[Resolution]:
    """offset에 있는 pHYs 청크를 해석합니다.

    길이가 9가 아니거나, 버퍼를 넘어가거나, 단위가 미터가 아니면 None을 반환합니다.
    """
    if offset < 4 or offset + 4 + PHYS_DATA_LENGTH + 4 > len(buffer):
        return None

    length = struct.unpack('>I', buffer[offset - 4:offset])[0]
    if length != PHYS_DATA_LENGTH:
        return None

    ppm_x, ppm_y, unit = struct.unpack('>IIB', buffer[offset + 4:offset + 13])

    # 단위가 미터가 아니면 해상도는 정의되지 않습니다
    if unit != UNIT_METRE:
        return None
    return Resolution(ppm_x=ppm_x, ppm_y=ppm_y, unit=unit)


def get_ppm(buffer: bytes) -> Optional[Resolution]:
    """IDAT 앞에 있는 pHYs 청크의 해상도를 반환합니다."""
    offset = locate_chunk(buffer, PHYS, precedes_idat=True)
    if offset is None:
        return None
    return decode_resolution(buffer, offset)


def _phys_chunk(ppm_x: int, ppm_y: int) -> bytes:
    """길이, 타입, 데이터, CRC를 포함한 21바이트 pHYs 청크를 만듭니다."""
    type_and_data = struct.pack('>4sIIB', PHYS, ppm_x, ppm_y, UNIT_METRE)
    return (
        struct.pack('>I', PHYS_DATA_LENGTH)
        + type_and_data
        + struct.pack('>I', crc.checksum(type_and_data))
    )


def set_resolution(buffer: bytes, ppi_x: float, ppi_y: float) -> bytes:
    """pHYs 청크를 새 해상도로 덮어쓰거나 첫 IDAT 앞에 삽입한 새 버퍼를 반환합니다."""
    if bytes(buffer[:len(PNG_SIGNATURE)]) != PNG_SIGNATURE:
        raise MalformedPngError("유효한 PNG 파일이 아닙니다")

    chunk = _phys_chunk(ppi_to_ppm(ppi_x), ppi_to_ppm(ppi_y))

    offset = locate_chunk(buffer, PHYS, precedes_idat=True)
    if offset is not None:
        length = struct.unpack('>I', buffer[offset - 4:offset])[0]
        if length != PHYS_DATA_LENGTH:
            raise MalformedPngError(f"pHYs 청크 길이가 {length}입니다 (9이어야 함)")
        start = offset - 4
        if start + PHYS_CHUNK_SIZE > len(buffer):
            raise MalformedPngError("pHYs 청크가 버퍼 끝을 넘어갑니다")

        data = bytearray(buffer)
        data[start:start + PHYS_CHUNK_SIZE] = chunk
        return bytes(data)

    idat_offset = locate_chunk(buffer, IDAT)
    if idat_offset is None:
        raise MissingImageDataError("IDAT 청크가 없어 pHYs 청크를 삽입할 수 없습니다")

    start = idat_offset - 4
    return bytes(buffer[:start]) + chunk + bytes(buffer[start:])


class PNG:
    """PNG 이미지 처리 클래스"""

    def __init__(self, buffer: bytes):
        """
        Args:
            buffer: PNG 이미지의 바이트 데이터
        """
        self.buffer = buffer

    def has_ppi(self) -> bool:
        return locate_chunk(self.buffer, PHYS, precedes_idat=True) is not None

    def get_ppm(self) -> Optional[Resolution]:
        """미터당 픽셀 해상도를 반환합니다. 정의되지 않았으면 None."""
        return get_ppm(self.buffer)

    def get_ppi(self) -> Optional[tuple]:
        """(가로, 세로) 인치당 픽셀을 반환합니다. 정의되지 않았으면 None."""
        resolution = self.get_ppm()
        if resolution is None:
            return None
        return resolution.ppi_x, resolution.ppi_y

    def set_ppi(self, ppi_x: float, ppi_y: float) -> bytes:
        """해상도를 설정하고 새 버퍼를 반환합니다. self.buffer도 갱신됩니다."""
        self.buffer = set_resolution(self.buffer, ppi_x, ppi_y)
        return self.buffer
