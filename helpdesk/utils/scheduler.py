"""Background task scheduler for periodic license checks"""
from apscheduler.schedulers.background import BackgroundScheduler
import logging

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = None


def init_scheduler(app):
    """Initialize APScheduler with Flask app context"""
    global scheduler

    if scheduler is not None:
        return scheduler

    scheduler = BackgroundScheduler()
    scheduler.configure(
        jobstores={'default': {'type': 'memory'}},
        job_defaults={'coalesce': True, 'max_instances': 1}
    )

    # Runs every day at 6:00 AM
    scheduler.add_job(
        check_license_expiry,
        'cron',
        hour=6,
        minute=0,
        args=[app],
        id='check_license_expiry',
        name='Check license expiry',
        replace_existing=True
    )

    if not scheduler.running:
        scheduler.start()
        logger.info("Background scheduler started")
    return scheduler


def check_license_expiry(app, now=None):
    """Log and audit the license state when it is unusable or close to expiry."""
    with app.app_context():
        from helpdesk.services.licensing.manager import check_license
        from helpdesk.utils.audit_log import log_action

        try:
            status = check_license(now=now)
        except Exception as e:
            logger.error(f"Error during license expiry check: {e}")
            return None

        warning_days = app.config.get('LICENSE_EXPIRY_WARNING_DAYS', 30)
        if status.is_expired:
            logger.error(f"License check: {status.message}")
            log_action('LICENSE_EXPIRED', status.message, success=False)
        elif not status.is_valid:
            logger.warning(f"License check: {status.message}")
        elif status.days_remaining is not None and status.days_remaining <= warning_days:
            logger.warning(f"License check: license expires in {status.days_remaining} days")
            log_action('LICENSE_EXPIRING', f'License expires in {status.days_remaining} days',
                       additional_info={'days_remaining': status.days_remaining})
        else:
            logger.info(f"License check: {status.days_remaining} days remaining")
        return status


def shutdown_scheduler():
    """Shutdown the scheduler gracefully"""
    global scheduler

    if scheduler and scheduler.running:
        scheduler.shutdown()
        logger.info("Background scheduler stopped")
    scheduler = None
