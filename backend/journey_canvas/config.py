"""
Runtime settings for the canvas engine and server.

Values come from ``JOURNEY_CANVAS_*`` environment variables, falling back to
the defaults in :mod:`journey_canvas.constants`.
"""

import os
from pathlib import Path

from pydantic import BaseModel, Field

from journey_canvas import constants as const


class CanvasSettings(BaseModel):
    """Settings shared by the server and canvas sessions."""
    data_dir: Path = Path(const.DEFAULT_DATA_DIR)
    db_backend: str = const.DEFAULT_DB_BACKEND
    autosave_delay: float = Field(default=const.AUTOSAVE_DELAY_SECONDS, gt=0)

    @property
    def db_path(self) -> Path:
        return self.data_dir / const.DEFAULT_DB_NAME


def load_settings() -> CanvasSettings:
    """Build settings from the process environment."""
    return CanvasSettings(
        data_dir=Path(os.environ.get("JOURNEY_CANVAS_DATA_DIR", const.DEFAULT_DATA_DIR)),
        db_backend=os.environ.get("JOURNEY_CANVAS_DB_BACKEND", const.DEFAULT_DB_BACKEND),
        autosave_delay=float(
            os.environ.get("JOURNEY_CANVAS_AUTOSAVE_DELAY", const.AUTOSAVE_DELAY_SECONDS)
        ),
    )
