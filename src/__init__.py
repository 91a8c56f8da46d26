"""CDC Admin Core.

Multi-tenant eligibility and targeting engine for a network of Child
Development Centers: access scoping, developmental age bands and
content visibility.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
