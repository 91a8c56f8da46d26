# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for the CDC administrative core.

Each domain module holds its pure decision logic next to the async
service that feeds it from the database.

Domains:
    age: Age computation and age-band classification.
    tenant: CDC directory, registration and listing.
    access: Role x operation authorization and actor resolution.
    content: Content targeting, announcements and activities.
    student: Enrollment and age-annotated listings.
    focal: Focal person accounts, one per municipality.
    statistics: Cross-CDC aggregates for social welfare officers.
    attendance: Daily attendance marks, rates and weekly summaries.
    activity: Take-home activity management for CDC workers.
    homework: Parent homework uploads and activity submissions.
"""
