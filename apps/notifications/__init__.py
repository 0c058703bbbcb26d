"""Notifications app package.

User-facing notifications about booking activity. Each row is written in
the same transaction as the booking change that caused it and doubles as an
outbox entry: Celery workers hand pending rows to the configured sink
(e-mail or log) after commit and record the outcome on the row.
"""
