# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database seed package.

- Resources: the starter catalog shown before any provider fetch
- Users: an admin account for the curation and provider routes
"""

from zimlearn.infrastructure.database.seeds.resources import STARTER_RESOURCES, seed_resources
from zimlearn.infrastructure.database.seeds.users import seed_admin_user

__all__ = ["STARTER_RESOURCES", "seed_admin_user", "seed_resources"]
