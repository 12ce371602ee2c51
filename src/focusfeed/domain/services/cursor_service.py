"""Domain service for opaque continuation cursors."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass

from ...error_codes import ErrorCode
from ...exceptions import BadRequestError

MAX_TOKEN_LENGTH = 4096
# JSON escaping can grow a byte to six, so 480 bytes always encodes under
# MAX_TOKEN_LENGTH.
MAX_SNIPPET_BYTES = 480


@dataclass(frozen=True)
class ContinuationCursor:
    """Position in a viewer's infinite feed.

    Attributes:
        page: Zero-based page index the cursor points at
        last_snippet: Last snippet served on the previous page
    """

    page: int = 0
    last_snippet: str = ""

    def next(self, last_snippet: str) -> ContinuationCursor:
        return ContinuationCursor(page=self.page + 1, last_snippet=last_snippet)


class CursorService:
    """Encodes cursors as URL-safe base64 JSON and decodes them back."""

    @staticmethod
    def encode(cursor: ContinuationCursor) -> str:
        """Encode a cursor, keeping at most MAX_SNIPPET_BYTES of the last snippet."""
        last_snippet = cursor.last_snippet.encode("utf-8")[:MAX_SNIPPET_BYTES]
        payload = json.dumps(
            {"p": cursor.page, "l": last_snippet.decode("utf-8", errors="ignore")},
            ensure_ascii=False,
            separators=(",", ":"),
        )
        token = base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")
        return token.rstrip("=")

    @staticmethod
    def decode(token: str | None) -> ContinuationCursor:
        """Decode a cursor token.

        A missing or empty token is the start of the feed.

        Raises:
            BadRequestError: If the token is not a cursor produced by encode()
        """
        if not token:
            return ContinuationCursor()

        if len(token) > MAX_TOKEN_LENGTH:
            msg = "Continuation cursor is too long"
            raise BadRequestError(msg, error_code=ErrorCode.REQ_CURSOR_INVALID.value)

        padded = token + "=" * (-len(token) % 4)
        try:
            raw = base64.urlsafe_b64decode(padded.encode("ascii"))
            data = json.loads(raw.decode("utf-8"))
        except (binascii.Error, UnicodeError, ValueError) as e:
            msg = "Continuation cursor could not be decoded"
            raise BadRequestError(
                msg,
                error_code=ErrorCode.REQ_CURSOR_INVALID.value,
                context={"reason": str(e)},
            ) from e

        if not isinstance(data, dict):
            msg = "Continuation cursor has an unexpected shape"
            raise BadRequestError(msg, error_code=ErrorCode.REQ_CURSOR_INVALID.value)

        page = data.get("p")
        last_snippet = data.get("l", "")
        if (
            not isinstance(page, int)
            or isinstance(page, bool)
            or page < 0
            or not isinstance(last_snippet, str)
        ):
            msg = "Continuation cursor has an unexpected shape"
            raise BadRequestError(msg, error_code=ErrorCode.REQ_CURSOR_INVALID.value)

        return ContinuationCursor(page=page, last_snippet=last_snippet)
