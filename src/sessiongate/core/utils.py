# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import re

_MARKUP_CHARS = re.compile(r"[<>]")


def strip_markup(text: str) -> str:
    """Drop angle brackets so user text cannot open a tag when echoed."""
    return _MARKUP_CHARS.sub("", str(text or ""))
