"""
Environment-driven configuration
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


def _parse_origins(value: Optional[str]) -> Tuple[str, ...]:
    """Comma-separated origins; empty or '*' means allow any"""
    if not value:
        return ()
    origins = tuple(o.strip() for o in value.split(",") if o.strip())
    if "*" in origins:
        return ()
    return origins


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    static_dir: Path = Path("./static")
    ws_path: str = "/ws"
    allowed_origins: Tuple[str, ...] = ()
    log_level: str = "INFO"
    send_timeout: float = 5.0

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            host=os.environ.get("SERVER_HOST", "0.0.0.0"),
            port=int(os.environ.get("PORT", 3000)),
            static_dir=Path(os.getenv("WATCHSYNC_STATIC_DIR", "./static")),
            ws_path=os.getenv("WATCHSYNC_WS_PATH", "/ws"),
            allowed_origins=_parse_origins(os.getenv("ALLOWED_ORIGIN")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            send_timeout=float(os.getenv("WATCHSYNC_SEND_TIMEOUT", 5.0)),
        )
