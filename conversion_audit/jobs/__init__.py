"""
Scheduled jobs for the conversion audit.

Jobs:
- conversion_audit: one complete audit run with report delivery
- email_notifier: SMTP transport for reports and error notifications
"""

from conversion_audit.jobs.conversion_audit import run_conversion_audit
from conversion_audit.jobs.email_notifier import EmailNotifier

__all__ = [
    'run_conversion_audit',
    'EmailNotifier',
]
