# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Outbound email for account notifications."""

from zimlearn.infrastructure.notifications.email import EmailDeliveryError, EmailSender

__all__ = ["EmailDeliveryError", "EmailSender"]
