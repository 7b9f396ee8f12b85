"""
Text-safe base64 codec.
A variant is selected once and reused for every encode/decode on the instance.
"""

import base64
import binascii
import logging
from typing import Optional, Union

from ..config import CODEC_VARIANTS
from ..exceptions import DecodeError, EncoderNotConfigured, InvalidInput

logger = logging.getLogger(__name__)

_URLSAFE_ALTCHARS = b"-_"


class Codec:
    """
    Base64 codec with four variants.

    standard / urlsafe use "=" padding; the *_raw variants omit it and reject it on decode.
    """

    def __init__(self, variant: Optional[str] = None):
        self.variant = None
        if variant is not None:
            self.select(variant)

    def select(self, variant: str) -> None:
        """Select the encoding variant used by this codec."""
        if variant not in CODEC_VARIANTS:
            raise InvalidInput(f"Unknown codec variant: {variant}")
        self.variant = variant

    @property
    def _altchars(self) -> Optional[bytes]:
        return _URLSAFE_ALTCHARS if self.variant.startswith("urlsafe") else None

    @property
    def _raw(self) -> bool:
        return self.variant.endswith("_raw")

    def encode(self, data: Union[bytes, bytearray, str], variant: Optional[str] = None) -> str:
        """
        Encode bytes to text.

        Args:
            data: Bytes to encode (str is UTF-8 encoded)
            variant: Optional variant; selects it for this and later calls

        Returns:
            ASCII text

        Raises:
            EncoderNotConfigured: If no variant was given or selected before
        """
        if variant is not None:
            self.select(variant)
        if self.variant is None:
            raise EncoderNotConfigured("Encoder is not configured")

        if isinstance(data, str):
            data = data.encode("utf-8")

        encoded = base64.b64encode(bytes(data), altchars=self._altchars)
        if self._raw:
            encoded = encoded.rstrip(b"=")
        return encoded.decode("ascii")

    def decode(self, text: Union[str, bytes]) -> bytes:
        """
        Decode text produced by the selected variant.

        Raises:
            EncoderNotConfigured: If no variant was ever selected
            DecodeError: If the text is not valid for the variant
        """
        if self.variant is None:
            raise EncoderNotConfigured("Encoder is not configured")

        try:
            if isinstance(text, str):
                text = text.encode("ascii")
            if self._raw:
                if b"=" in text:
                    raise DecodeError(f"Padding is not allowed in {self.variant} input")
                text = text + b"=" * (-len(text) % 4)
            if self._altchars and (b"+" in text or b"/" in text):
                raise DecodeError(f"Standard alphabet characters in {self.variant} input")
            return base64.b64decode(text, altchars=self._altchars, validate=True)
        except (binascii.Error, UnicodeEncodeError, TypeError) as e:
            logger.warning(f"Base64 decode failed ({self.variant}): {e}")
            raise DecodeError(f"Invalid {self.variant} base64 input: {e}") from e
