# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""sessiongate: email/password accounts, login sessions and a protected echo page."""

__version__ = "0.1.0"
