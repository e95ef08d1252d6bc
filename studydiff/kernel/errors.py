from __future__ import annotations

import re
from typing import Any


_ERROR_CODE_RE = re.compile(r"^[a-z][a-z0-9_]*(\.[a-z][a-z0-9_]*)*$")


class StudyDiffError(Exception):
    """Base typed error for studydiff.

    Goals:
    - Stable `code` for programmatic handling (changelog failure entries carry it).
    - Human-readable `message` for report surfaces.
    - Optional `meta` payload for debugging.
    """

    def __init__(
        self,
        *,
        code: str,
        message: str,
        meta: dict[str, Any] | None = None,
    ) -> None:
        if not _ERROR_CODE_RE.fullmatch(code):
            raise ValueError(
                "Invalid studydiff error code. Expected dot-separated lowercase tokens, "
                f"got: {code!r}"
            )
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = dict(meta or {})

    def to_public_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "detail": self.message,
            "code": self.code,
        }
        if self.meta:
            payload["meta"] = self.meta
        return payload


class InvalidKeyError(StudyDiffError, ValueError):
    def __init__(
        self,
        *,
        message: str = "Invalid composite key",
        code: str = "key.invalid",
        meta: dict[str, Any] | None = None,
    ):
        super().__init__(code=code, message=message, meta=meta)


class KeyArityError(StudyDiffError, LookupError):
    def __init__(
        self,
        *,
        message: str = "Composite key arity mismatch",
        code: str = "key.arity_mismatch",
        meta: dict[str, Any] | None = None,
    ):
        super().__init__(code=code, message=message, meta=meta)


class SchemaMismatchError(StudyDiffError, TypeError):
    def __init__(
        self,
        *,
        message: str = "Schema mismatch",
        code: str = "schema.mismatch",
        meta: dict[str, Any] | None = None,
    ):
        super().__init__(code=code, message=message, meta=meta)


class ConfigurationError(StudyDiffError, ValueError):
    def __init__(
        self,
        *,
        message: str = "Invalid configuration",
        code: str = "config.invalid",
        meta: dict[str, Any] | None = None,
    ):
        super().__init__(code=code, message=message, meta=meta)
