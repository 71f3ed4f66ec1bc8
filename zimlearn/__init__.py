"""ZimLearn Backend.

Learning resource aggregation and account service for Zimbabwean
secondary-school students.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
