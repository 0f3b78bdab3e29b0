"""Period gate — resolves the period a submission belongs to and refuses
submissions once that period's payroll has been processed."""

from __future__ import annotations

import logging
from datetime import date

from payslip.common.constants import PayrollStatus
from payslip.common.exceptions import NoPeriodFoundError, PayrollAlreadyProcessedError
from payslip.payroll.repository import PayrollRepository, PeriodRepository

logger = logging.getLogger(__name__)


class PeriodGate:
    def __init__(self, periods: PeriodRepository, payrolls: PayrollRepository) -> None:
        self._periods = periods
        self._payrolls = payrolls

    async def resolve_period_for_submission(self, target_date: date) -> int:
        """Return the id of the open period covering *target_date*.

        Raises:
            NoPeriodFoundError: no period covers the date.
            PayrollAlreadyProcessedError: the period's payroll is processed.
        """
        period_id = await self._periods.find_period_containing(target_date)
        if period_id == 0:
            logger.info("No attendance period covers %s", target_date)
            raise NoPeriodFoundError(target_date.isoformat())

        status = await self._payrolls.get_payroll_status(period_id)
        if status == PayrollStatus.processed:
            logger.info("Period %s is locked by a processed payroll", period_id)
            raise PayrollAlreadyProcessedError()

        return period_id
