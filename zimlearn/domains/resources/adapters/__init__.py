# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Resource provider adapters."""

from zimlearn.domains.resources.adapters.base import (
    FetchQuery,
    ResourceAdapter,
    ResourceDraft,
)
from zimlearn.domains.resources.adapters.ck12 import CK12Adapter
from zimlearn.domains.resources.adapters.college_press import CollegePressAdapter
from zimlearn.domains.resources.adapters.mopse import MoPSEAdapter
from zimlearn.domains.resources.adapters.oer_commons import OERCommonsAdapter
from zimlearn.domains.resources.adapters.sbp import SecondaryBookPressAdapter
from zimlearn.domains.resources.adapters.teacha import TeachaAdapter
from zimlearn.domains.resources.adapters.youtube import YouTubeAdapter
from zimlearn.domains.resources.adapters.zimsec import ZimsecAdapter

__all__ = [
    "FetchQuery",
    "ResourceAdapter",
    "ResourceDraft",
    "CK12Adapter",
    "CollegePressAdapter",
    "MoPSEAdapter",
    "OERCommonsAdapter",
    "SecondaryBookPressAdapter",
    "TeachaAdapter",
    "YouTubeAdapter",
    "ZimsecAdapter",
]
