"""
Order background jobs.

Two interval jobs keep the order table consistent without touching the
request path:
1. Late sweep - flags orders past their due date
2. Settlement reconciliation - applies refunds and payouts left unsettled
"""
import logging
from django.conf import settings
from django.db import close_old_connections
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.executors.pool import ThreadPoolExecutor
from apps.orders.services.late_order_sweeper import LateOrderSweeper
from apps.orders.services.reconciler import SettlementReconciler

logger = logging.getLogger('scheduler')


def run_late_sweep() -> int:
    """Scheduled entry point for LateOrderSweeper."""
    close_old_connections()
    try:
        marked = LateOrderSweeper.sweep()
        logger.info(f"Late sweep finished: {marked} orders marked late")
        return marked
    finally:
        close_old_connections()


def run_settlement_reconciliation() -> int:
    """Scheduled entry point for SettlementReconciler."""
    close_old_connections()
    try:
        applied = SettlementReconciler.reconcile_settlements()
        logger.info(f"Settlement reconciliation finished: {applied} settlements applied")
        return applied
    finally:
        close_old_connections()


class OrderScheduler:
    """
    Blocking scheduler for the order jobs.

    Scheduling:
    - Late sweep: every ORDERS['LATE_SWEEP_INTERVAL_MINUTES'] (default 30)
    - Reconciliation: every ORDERS['RECONCILE_INTERVAL_MINUTES'] (default 60)
    """

    def __init__(self, sweep_minutes=None, reconcile_minutes=None):
        config = settings.ORDERS
        self.sweep_minutes = sweep_minutes or config['LATE_SWEEP_INTERVAL_MINUTES']
        self.reconcile_minutes = reconcile_minutes or config['RECONCILE_INTERVAL_MINUTES']

        self.scheduler = BlockingScheduler(
            jobstores={'default': MemoryJobStore()},
            executors={'default': ThreadPoolExecutor(2)},
            job_defaults={
                'coalesce': True,  # Collapse missed runs into one
                'max_instances': 1,
                'misfire_grace_time': 120,
            },
            timezone='UTC'
        )

    def setup_jobs(self):
        self.scheduler.add_job(
            run_late_sweep,
            trigger=IntervalTrigger(minutes=self.sweep_minutes),
            id='orders_late_sweep',
            name='Late order sweep',
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )
        logger.info(f"Late sweep scheduled every {self.sweep_minutes} minutes")

        self.scheduler.add_job(
            run_settlement_reconciliation,
            trigger=IntervalTrigger(minutes=self.reconcile_minutes),
            id='orders_settlement_reconciliation',
            name='Settlement reconciliation',
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )
        logger.info(f"Settlement reconciliation scheduled every {self.reconcile_minutes} minutes")

    def start(self):
        """Run both jobs once, then block until interrupted."""
        self.setup_jobs()

        run_late_sweep()
        run_settlement_reconciliation()

        logger.info("Order scheduler started")
        try:
            self.scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            logger.info("Order scheduler stopping")
        finally:
            close_old_connections()
