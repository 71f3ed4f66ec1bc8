# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Resource domain: provider adapters, aggregation and the catalog."""

from zimlearn.domains.resources.aggregation import (
    AggregationError,
    AggregationService,
    FetchResult,
    PersistenceOutcome,
    UnknownSourceError,
)
from zimlearn.domains.resources.catalog import (
    CatalogError,
    CatalogService,
    ResourceNotFoundError,
    ResourcePage,
    ResourceSearchParams,
)

__all__ = [
    "AggregationError",
    "AggregationService",
    "FetchResult",
    "PersistenceOutcome",
    "UnknownSourceError",
    "CatalogError",
    "CatalogService",
    "ResourceNotFoundError",
    "ResourcePage",
    "ResourceSearchParams",
]
