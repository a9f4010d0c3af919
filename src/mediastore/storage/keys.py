"""Storage key derivation for uploaded files.

A key is built as ``prefix + name + suffix + extension`` where ``name`` is
the original basename, a sanitized basename or the content fingerprint,
depending on the naming policy.
"""

import os
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Union

from mediastore.models.upload import UploadedFile
from mediastore.storage.fingerprint import fingerprint

# A literal string, or a zero-argument callable producing one on every use
PolicyValue = Union[str, Callable[[], str]]

# Moment-style date tokens; text inside [brackets] is kept literally
_DATE_TOKENS = re.compile(r"\[([^\]]*)\]|YYYY|SSS|YY|MM|DD|HH|mm|ss")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]+")
_REPEATED_DASHES = re.compile(r"-{2,}")

MAX_BASENAME_LENGTH = 255


class BasenameMode(str, Enum):
    """How the basename component of a key is produced."""

    VERBATIM = "verbatim"  # Original basename as uploaded
    SANITIZED = "sanitized"  # Basename passed through safe_string()
    CONTENT_HASHED = "content_hashed"  # MD5 of the file bytes


@dataclass(frozen=True)
class NamingPolicy:
    """Options controlling how a storage key is derived from a file name."""

    prefix: Optional[PolicyValue] = None
    suffix: Optional[PolicyValue] = None
    extname: bool = True
    hash_as_basename: bool = False
    safe_string: bool = False

    @property
    def basename_mode(self) -> BasenameMode:
        """Basename variant, content hashing taking precedence over sanitizing."""
        if self.hash_as_basename:
            return BasenameMode.CONTENT_HASHED
        if self.safe_string:
            return BasenameMode.SANITIZED
        return BasenameMode.VERBATIM


def evaluate(value: PolicyValue) -> str:
    """Return a literal policy value, or call a computed one."""
    return value() if callable(value) else value


def render_date_template(template: str, now: datetime) -> str:
    """Render YYYY, YY, MM, DD, HH, mm, ss and SSS tokens against ``now``.

    Any other text, and anything wrapped in square brackets, is copied
    through unchanged. Single-letter tokens such as M, D or H are not
    supported and stay literal: "YYYY/M/" renders as "2024/M/". Wrap words
    that contain token letters in brackets, e.g. "[assets]/YYYY/".
    """
    values = {
        "YYYY": f"{now.year:04d}",
        "YY": f"{now.year % 100:02d}",
        "MM": f"{now.month:02d}",
        "DD": f"{now.day:02d}",
        "HH": f"{now.hour:02d}",
        "mm": f"{now.minute:02d}",
        "ss": f"{now.second:02d}",
        "SSS": f"{now.microsecond // 1000:03d}",
    }

    def _replace(match: re.Match) -> str:
        literal = match.group(1)
        if literal is not None:
            return literal
        return values[match.group(0)]

    return _DATE_TOKENS.sub(_replace, template)


def safe_string(value: str) -> str:
    """Make a basename safe for use in a storage key.

    Path separators, dots, whitespace, control and non-ASCII characters
    become single dashes. Case is preserved.
    """
    safe = value.replace("'", "")
    safe = _UNSAFE_CHARS.sub("-", safe)
    safe = _REPEATED_DASHES.sub("-", safe)
    return safe.strip("-")[:MAX_BASENAME_LENGTH]


def split_filename(file_name: str) -> tuple[str, str]:
    """Split a file name into (basename, extension incl. leading dot)."""
    return os.path.splitext(os.path.basename(file_name))


async def resolve_key(
    file: UploadedFile,
    policy: Optional[NamingPolicy],
    now: Optional[datetime] = None,
) -> Optional[str]:
    """Derive the storage key for ``file`` under ``policy``.

    Args:
        file: Uploaded file; ``name`` drives the key, ``path`` is read only
            for content hashing
        policy: Naming policy, or None to let the storage backend pick a key
        now: Timestamp for the prefix template, defaults to the current time

    Returns:
        The key, or None when no policy is configured

    Raises:
        OSError: If content hashing cannot read the file
    """
    if policy is None:
        return None

    basename, ext = split_filename(file.name)

    prefix = ""
    if policy.prefix:
        template = evaluate(policy.prefix)
        prefix = render_date_template(template, now or datetime.now()).removeprefix("/")

    suffix = evaluate(policy.suffix) if policy.suffix else ""
    extension = ext.lower() if policy.extname is not False else ""

    def compose(name: str) -> str:
        return prefix + name + suffix + extension

    mode = policy.basename_mode
    if mode is BasenameMode.CONTENT_HASHED:
        return compose(await fingerprint(file))
    if mode is BasenameMode.SANITIZED:
        basename = safe_string(basename)

    return compose(basename)
