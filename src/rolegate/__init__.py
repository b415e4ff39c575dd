# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

__version__ = "0.1.0"
