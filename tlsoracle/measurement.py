# Author: tlsoracle developers, (c) 2026
# Released under Gnu GPL v2.0, see LICENSE file for details

"""Interface to the code performing the actual connections."""

import logging
import socket
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor

from tlslite.errors import TLSAbruptCloseError

from .vectors import ResponseMap


LOGGER = logging.getLogger(__name__)


class MeasurementFailure(Exception):

    """The whole measurement run could not be performed"""

    pass


MeasurementRequest = namedtuple('MeasurementRequest',
                                'configuration vectors iterations timeout '
                                'increasing_timeout')
"""
Request for measurement runs.

``timeout`` is the time in milliseconds to wait for the peer response,
with ``increasing_timeout`` set the executor may retry with longer
timeouts when the first attempt timed out.
"""


class MeasurementResult(namedtuple('MeasurementResult',
                                   'response_map failure')):
    """
    Outcome of a single measurement run.

    Exactly one of ``response_map`` and ``failure`` is set.
    """

    __slots__ = ()

    @classmethod
    def ok(cls, response_map):
        """Wrap a successfully collected run."""
        return cls(response_map, None)

    @classmethod
    def error(cls, failure):
        """Wrap the reason why the run could not be performed."""
        return cls(None, failure)

    @property
    def is_ok(self):
        return self.failure is None


class MeasurementExecutor(object):
    """
    Base class for objects executing measurement runs.

    Subclasses implement :py:meth:`execute`.
    """

    def execute(self, request):
        """
        Perform measurement runs.

        :param MeasurementRequest request: what to measure
        :return: iterator returning one :py:class:`MeasurementResult` for
            every iteration, in order
        """
        raise NotImplementedError("Subclass must implement execute()")


class CallbackExecutor(MeasurementExecutor):
    """
    Execute measurements using a function measuring a single vector.

    The ``measure`` callback is called as
    ``measure(configuration, vector, timeout)``, with timeout in seconds,
    and must return a
    :py:class:`~tlsoracle.fingerprint.ResponseFingerprint`.
    Connection errors (:py:class:`socket.error`,
    :py:class:`~tlslite.errors.TLSAbruptCloseError`, assertions of the
    conversation runner) make the fingerprint of the vector absent,
    :py:class:`MeasurementFailure` aborts the run.

    :ivar int workers: how many vectors may be measured in parallel
    :ivar int retries: how many times to retry a timed out vector when the
        request allows increasing timeouts
    """

    def __init__(self, measure, workers=None, retries=None):
        self.measure = measure
        if workers is None:
            workers = 1
        if retries is None:
            retries = 1
        if workers < 1:
            raise ValueError("At least one worker is needed")
        if retries < 0:
            raise ValueError("Number of retries can't be negative")
        self.workers = workers
        self.retries = retries

    def _measure_vector(self, configuration, vector, timeout,
                        increasing_timeout):
        attempts = self.retries + 1 if increasing_timeout else 1
        for attempt in range(attempts):
            try:
                return self.measure(configuration, vector, timeout / 1000.0)
            except socket.timeout:
                LOGGER.debug("Timeout (%d ms) on vector \"%s\" of %s, "
                             "attempt %d", timeout, vector.name,
                             configuration, attempt + 1)
                timeout *= 2
            except (socket.error, TLSAbruptCloseError, AssertionError) as exc:
                LOGGER.warning("Could not extract fingerprint for \"%s\" of "
                               "%s: %s", vector.name, configuration, exc)
                return None
        LOGGER.warning("Could not extract fingerprint for \"%s\" of %s: "
                       "timeout", vector.name, configuration)
        return None

    def _run(self, pool, request):
        def measure(vector):
            return self._measure_vector(request.configuration, vector,
                                        request.timeout,
                                        request.increasing_timeout)

        if pool is None:
            fingerprints = [measure(vector) for vector in request.vectors]
        else:
            fingerprints = list(pool.map(measure, request.vectors))
        return ResponseMap(zip(request.vectors, fingerprints))

    def execute(self, request):
        pool = None
        if self.workers > 1:
            pool = ThreadPoolExecutor(max_workers=self.workers)
        try:
            for _ in range(request.iterations):
                try:
                    response_map = self._run(pool, request)
                except MeasurementFailure as exc:
                    LOGGER.warning("Measurement of %s failed: %s",
                                   request.configuration, exc)
                    yield MeasurementResult.error(exc)
                else:
                    yield MeasurementResult.ok(response_map)
        finally:
            if pool is not None:
                pool.shutdown()
