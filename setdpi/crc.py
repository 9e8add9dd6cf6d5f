"""PNG 청크용 CRC-32 (IEEE 802.3, 반사형 테이블)"""

import struct

POLYNOMIAL = 0xEDB88320
INITIAL = 0xFFFFFFFF


def _make_table() -> tuple:
    """모든 8비트 값에 대한 CRC 테이블을 만듭니다."""
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            if c & 1:
                c = POLYNOMIAL ^ (c >> 1)
            else:
                c >>= 1
        table.append(c)
    return tuple(table)


CRC_TABLE = _make_table()


def update(crc: int, data: bytes) -> int:
    """실행 중인 CRC 레지스터에 data를 반영합니다.

    레지스터는 0xFFFFFFFF로 시작해야 하며, 최종 값은 1의 보수를 취해야 합니다.
    """
    c = crc
    for byte in data:
        c = CRC_TABLE[(c ^ byte) & 0xFF] ^ (c >> 8)
    return c


def checksum(data: bytes) -> int:
    """data의 CRC-32 값을 반환합니다."""
    return update(INITIAL, data) ^ 0xFFFFFFFF


def verify_chunk(buffer: bytes, offset: int) -> bool:
    """offset(청크 타입 위치)에 있는 청크의 저장된 CRC가 올바른지 확인합니다."""
    if offset < 4 or offset + 4 > len(buffer):
        return False
    length = struct.unpack('>I', buffer[offset - 4:offset])[0]
    end = offset + 4 + length
    if end + 4 > len(buffer):
        return False
    stored = struct.unpack('>I', buffer[end:end + 4])[0]
    return checksum(buffer[offset:end]) == stored
