"""PNG 해상도(pHYs) 편집 도구"""

__version__ = "1.0.0"
