# signature/logic/signature_service.py
from __future__ import annotations

from typing import Any, Optional

from core.config.config_service import SignatureConfig

from ..models.compression_config import CompressionConfig
from ..models.pad_options import PadOptions
from .data_url import format_bytes, get_data_url_size
from .drawing_surface import DrawingSurface
from .image_compression import compress_with_config
from .signature_capture import ChangeCallback, SignatureCapture

_FEATURE_ID = "Signature"


class SignatureService:
    """
    Signature logic shared by the views (no UI).

    Reads pen and compression settings from the [Signature] config section and
    writes an audit entry for each compressed upload when a logger is given.
    """

    def __init__(self, *, config: Optional[SignatureConfig] = None,
                 logger: Optional[Any] = None) -> None:
        if config is None:
            from core.config.config_service import config_service  # lazy
            config = config_service.signature
        self._config = config
        self._logger = logger

    # -------- settings ------------------------------------------------------
    def pad_options(self) -> PadOptions:
        return PadOptions(min_width=float(self._config.pen_min_width),
                          max_width=float(self._config.pen_max_width))

    def compression_config(self) -> CompressionConfig:
        return CompressionConfig(max_width=self._config.max_width,
                                 max_height=self._config.max_height,
                                 quality=self._config.quality)

    # -------- capture -------------------------------------------------------
    def create_capture(self, css_width: int, css_height: int, on_change: ChangeCallback, *,
                       value: Optional[str] = None, disabled: bool = False,
                       device_pixel_ratio: float = 1.0) -> SignatureCapture:
        surface = DrawingSurface(css_width, css_height, options=self.pad_options(),
                                 device_pixel_ratio=device_pixel_ratio)
        return SignatureCapture(surface, on_change, value=value, disabled=disabled)

    # -------- upload --------------------------------------------------------
    async def compress_for_upload(self, data_url: str, *, reference_id: Optional[str] = None,
                                  username: Optional[str] = None) -> str:
        """Compress with the configured box/quality; falls back to *data_url*."""
        result = await compress_with_config(data_url, self.compression_config())
        if self._logger is not None:
            before, after = get_data_url_size(data_url), get_data_url_size(result)
            self._logger.log(
                _FEATURE_ID,
                "Compressed" if result is not data_url else "CompressionSkipped",
                username=username,
                reference_id=reference_id,
                level="INFO" if result is not data_url else "WARNING",
                message=f"{format_bytes(before)} -> {format_bytes(after)}",
            )
        return result
