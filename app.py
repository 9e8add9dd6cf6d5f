import glob
import os
from typing import Any, Dict, List, Tuple

from setdpi.logger import trace, warning
from setdpi.png import PNG, PngError


# Internal command functions -------------------------------------------------

def split_pattern(pattern: str) -> Tuple[str, str]:
    """패턴을 디렉터리와 파일 패턴으로 나눕니다. 디렉터리가 없으면 현재 디렉터리."""
    directory, file_pattern = os.path.split(pattern)
    return directory or ".", file_pattern


def format_ppi(value: float) -> str:
    """값을 잘림 없이 출력합니다. 정수 값은 소수점 없이 표시합니다."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def set_dpi_for_file(path: str, ppi_x: float, ppi_y: float) -> Dict[str, Any]:
    """파일 하나의 해상도를 바꾸고 이전/새 값을 반환합니다."""
    with open(path, 'rb') as f:
        image = PNG(f.read())

    previous = image.get_ppi() or (0, 0)
    updated = image.set_ppi(ppi_x, ppi_y)

    with open(path, 'wb') as f:
        f.write(updated)

    trace(f"Wrote {len(updated)} bytes to {path}")
    return {
        "status": "updated",
        "file": path,
        "was": list(previous),
        "now": [ppi_x, ppi_y],
    }


def set_dpi_for_pattern(pattern: str, ppi_x: float, ppi_y: float) -> List[Dict[str, Any]]:
    directory, file_pattern = split_pattern(pattern)

    if not os.path.isdir(directory):
        warning(f"Directory {directory} does not exist. Skipping.")
        return []

    files = sorted(
        path for path in glob.glob(os.path.join(glob.escape(directory), file_pattern))
        if os.path.isfile(path)
    )
    if len(files) == 0:
        warning(f"No files matching the pattern {file_pattern} in the directory {directory}. Skipping.")
        return []

    results = []
    for path in files:
        try:
            results.append(set_dpi_for_file(path, ppi_x, ppi_y))
        except (PngError, OSError) as e:
            warning(f"Failed to set DPI for image {path} ({e}).")
            results.append({"status": "error", "file": path, "reason": str(e)})
    return results


def set_dpi(ppi_x: float, ppi_y: float, patterns: List[str]) -> List[Dict[str, Any]]:
    """모든 패턴에 일치하는 PNG 파일의 해상도를 설정합니다."""
    results = []
    for pattern in patterns:
        results.extend(set_dpi_for_pattern(pattern, ppi_x, ppi_y))
    return results


def describe(result: Dict[str, Any]) -> str:
    """결과 하나를 콘솔 출력용 문자열로 만듭니다."""
    if result["status"] != "updated":
        return f"{result['file']} - failed: {result['reason']}"
    was_x, was_y = (format_ppi(v) for v in result["was"])
    now_x, now_y = (format_ppi(v) for v in result["now"])
    return f"{result['file']} - DPI (x,y): was ({was_x},{was_y}), now ({now_x},{now_y})"
