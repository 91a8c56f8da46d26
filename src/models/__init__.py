# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic models shared by the domain services.

Modules:
    common: Role, tenant status and content kind enums.
    person: Caller identity, users, children and geography.
    tenant: CDC tenants and their locations.
    age: Ages, month ranges and age bands.
    content: Targeted content items and publishing requests.
    student: Enrollment requests and student summaries.
    focal: Focal person account requests.
    attendance: Attendance marks and summaries.
    homework: Activities, homework uploads and submissions.
"""
