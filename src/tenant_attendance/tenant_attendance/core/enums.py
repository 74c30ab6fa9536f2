from __future__ import annotations

from enum import Enum


class PlanType(str, Enum):
    """Gói dịch vụ của tenant; quyết định cách xác minh khuôn mặt khi chấm công."""

    FREE = "FREE"
    PAID = "PAID"


class TokenKind(str, Enum):
    """Loại token; mỗi loại ký bằng một secret riêng."""

    ACCESS = "access"
    REFRESH = "refresh"
    LOCATION = "location"
