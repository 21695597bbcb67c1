"""Waits for the provider to publish a report reference for a VIN.

The provider generates reports asynchronously after the lookup call, so the
summary endpoint is polled until a report link or payload shows up.
"""

import logging

from vinreport.models.errors import UpstreamError
from vinreport.models.vehicle import ReportReference, VinRecord
from vinreport.services.provider_client import CarsimulcastClient
from vinreport.services.retry import RetryPolicy

logger = logging.getLogger(__name__)


class ReportPoller:
    """Polls the summary endpoint under a RetryPolicy.

    Usage:
        poller = ReportPoller(provider, RetryPolicy(max_attempts=5, delay_fn=fixed_delay(3.0)))
        reference = await poller.await_report_reference("1HGCM82633A004352")
    """

    def __init__(self, provider: CarsimulcastClient, policy: RetryPolicy) -> None:
        self._provider = provider
        self._policy = policy

    @property
    def max_attempts(self) -> int:
        return self._policy.max_attempts

    async def await_report_reference(self, vin: str) -> ReportReference | None:
        """Return the report reference, or None once all attempts are spent.

        Provider errors during a poll count as a failed attempt.
        """

        async def poll() -> VinRecord | None:
            return await self._provider.lookup(vin)

        outcome = await self._policy.run(
            poll,
            lambda record: record is not None and record.report_reference is not None,
            retry_on=(UpstreamError,),
            label=f"report poll for {vin}",
        )

        if not outcome.succeeded or outcome.value is None:
            logger.warning(
                "No report reference for %s after %d attempts", vin, outcome.attempts
            )
            return None

        logger.info("Report reference for %s found on attempt %d", vin, outcome.attempts)
        return outcome.value.report_reference
