# Author: tlsoracle developers, (c) 2026
# Released under Gnu GPL v2.0, see LICENSE file for details

"""Adaptive search for response oracles in TLS peers."""

import logging
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor
from threading import Event, Thread

from .constants import OracleType, ScanDetail, EqualityError, ProbeVerdict
from .enumerator import enumerate_configurations, get_family
from .leak import InformationLeakTest, InconsistentMeasurement, \
        StatisticalSignificance
from .measurement import MeasurementRequest
from .utils.progress_report import progress_report
from .vectors import ResponseMap, vector_sequence


LOGGER = logging.getLogger(__name__)


BASE_ITERATIONS = 3
BASE_ITERATIONS_QUICK = 1
EXTENDED_ITERATIONS = 7
EXTENDED_ITERATIONS_QUICK = 9
TIMEOUT = 50
TIMEOUT_DETAILED = 1000


def default_base_iterations(scan_detail):
    """Number of runs of every configuration in the initial pass."""
    if scan_detail >= ScanDetail.NORMAL:
        return BASE_ITERATIONS
    return BASE_ITERATIONS_QUICK


def default_extended_iterations(scan_detail):
    """Number of runs added to a configuration in the extended pass."""
    if scan_detail >= ScanDetail.NORMAL:
        return EXTENDED_ITERATIONS
    return EXTENDED_ITERATIONS_QUICK


def timeout_policy(scan_detail):
    """
    Return the ``(timeout, increasing_timeout)`` pair for measurements.

    Timeout is in milliseconds.
    """
    if scan_detail >= ScanDetail.DETAILED:
        return TIMEOUT_DETAILED, True
    return TIMEOUT, False


def reduce_verdicts(verdicts):
    """
    Combine verdicts of individual configurations into probe verdict.

    Any confirmed oracle wins, then any inconclusive configuration; a probe
    is reported as not testable only when no configuration could be tested.
    """
    verdicts = set(verdicts)
    for verdict in (ProbeVerdict.TRUE, ProbeVerdict.UNCERTAIN,
                    ProbeVerdict.FALSE):
        if verdict in verdicts:
            return verdict
    return ProbeVerdict.COULD_NOT_TEST


class ProbeResult(namedtuple('ProbeResult', 'oracle_type verdict tests')):
    """
    Outcome of a probe.

    :ivar int oracle_type: :py:class:`~tlsoracle.constants.OracleType`
    :ivar int verdict: :py:class:`~tlsoracle.constants.ProbeVerdict`
    :ivar list tests: the finalized
        :py:class:`~tlsoracle.leak.InformationLeakTest` objects, None when
        the evidence was not requested
    """

    __slots__ = ()

    def __str__(self):
        return "{0}: {1}".format(OracleType.toStr(self.oracle_type),
                                 ProbeVerdict.toStr(self.verdict))


class AdaptiveOracleScanner(object):
    """
    Find out if the peer behaves differently for different vectors.

    All configurations are measured once (or ``base_iterations`` times,
    when the first run shows a difference), then the configurations that
    showed a difference are measured again to verify that the difference
    is stable.
    """

    def __init__(self, oracle_type, scan_detail, capabilities, executor,
                 base_iterations=None, extended_iterations=None,
                 significance_rule=None, workers=None, keep_tests=None,
                 progress=False, delay=None, carriage_return=None):
        """
        Set up the probe.

        :param int oracle_type: :py:class:`~tlsoracle.constants.OracleType`
        :param int scan_detail: :py:class:`~tlsoracle.constants.ScanDetail`
        :param Capabilities capabilities: what is known about the peer
        :param MeasurementExecutor executor: object performing the
            connections
        :param int base_iterations: runs in initial pass, by default
            depends on scan detail
        :param int extended_iterations: runs added in the extended pass, by
            default depends on scan detail
        :param callable significance_rule: check applied to tests with
            distinct answers, :py:class:`StatisticalSignificance` with
            default alpha if unset
        :param int workers: how many configurations to measure in parallel
        :param bool keep_tests: include the tests in the result, by default
            only when scan detail is DETAILED or higher
        :param bool progress: periodically print progress of the scan
        :param float delay: how often to print progress, in seconds
        :param str carriage_return: line terminator of progress lines
        """
        self.family = get_family(oracle_type)
        self.oracle_type = oracle_type
        self.scan_detail = scan_detail
        self.capabilities = capabilities
        self.executor = executor
        if base_iterations is None:
            base_iterations = default_base_iterations(scan_detail)
        if extended_iterations is None:
            extended_iterations = default_extended_iterations(scan_detail)
        if base_iterations < 1:
            raise ValueError("At least one base iteration is required")
        if extended_iterations < 0:
            raise ValueError("Number of extended iterations can't be "
                             "negative")
        self.base_iterations = base_iterations
        self.extended_iterations = extended_iterations
        if significance_rule is None:
            significance_rule = StatisticalSignificance()
        self.significance_rule = significance_rule
        if workers is None:
            workers = 1
        if workers < 1:
            raise ValueError("At least one worker is needed")
        self.workers = workers
        if keep_tests is None:
            keep_tests = scan_detail >= ScanDetail.DETAILED
        self.keep_tests = keep_tests
        self.progress = progress
        self.delay = delay
        self.carriage_return = carriage_return
        self.timeout, self.increasing_timeout = timeout_policy(scan_detail)
        self._status = None

    def _measure(self, test, vectors, iterations):
        """
        Append ``iterations`` runs to the test.

        :return: False if the measurement failed and the configuration
            can't be measured further, True otherwise
        """
        request = MeasurementRequest(test.configuration, vectors, iterations,
                                     self.timeout, self.increasing_timeout)
        received = 0
        for result in self.executor.execute(request):
            received += 1
            if not result.is_ok:
                LOGGER.warning("%s: measurement failed: %s",
                               self.family.describe(test.configuration),
                               result.failure)
                test.add_response_map(ResponseMap.absent(vectors))
                return False
            if result.response_map.vectors != tuple(vectors):
                raise InconsistentMeasurement(
                    "Executor returned run with unexpected vectors for {0}"
                    .format(test.configuration))
            test.add_response_map(result.response_map)
            if received == iterations:
                break
        if received < iterations:
            LOGGER.warning("%s: executor returned %d of %d runs",
                           self.family.describe(test.configuration),
                           received, iterations)
            test.add_response_map(ResponseMap.absent(vectors))
            return False
        return True

    def _initial_pass(self, configuration):
        vectors = vector_sequence(self.oracle_type, configuration)
        test = InformationLeakTest(configuration)
        usable = self._measure(test, vectors, 1)
        if usable and test.reference_error == EqualityError.NONE:
            LOGGER.debug("%s: no difference in responses",
                         self.family.describe(configuration))
        elif usable and self.base_iterations > 1:
            usable = self._measure(test, vectors, self.base_iterations - 1)
        self._advance()
        return test, usable

    def _extended_pass(self, test):
        vectors = vector_sequence(self.oracle_type, test.configuration)
        self._measure(test, vectors, self.extended_iterations)
        self._advance()
        return test

    def _advance(self):
        if self._status is not None:
            self._status[0] += 1

    def _map(self, func, items):
        if self.workers == 1 or len(items) < 2:
            return [func(i) for i in items]
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            return list(pool.map(func, items))

    def _start_progress(self, total):
        if not self.progress or not total:
            return None
        self._status = [0, total, Event()]
        thread = Thread(target=progress_report, args=(self._status,),
                        kwargs={'unit': ' conf', 'delay': self.delay,
                                'end': self.carriage_return})
        thread.start()
        return thread

    def _stop_progress(self, thread):
        if thread is not None:
            self._status[2].set()
            thread.join()
            print()
        self._status = None

    def _run_pass(self, func, items):
        thread = self._start_progress(len(items))
        try:
            return self._map(func, items)
        finally:
            self._stop_progress(thread)

    def scan(self):
        """
        Run the probe.

        :rtype: ProbeResult
        """
        configurations = enumerate_configurations(
            self.capabilities, self.scan_detail, self.oracle_type)
        if not configurations:
            LOGGER.info("%s: nothing to test", self.family.name)
            return ProbeResult(self.oracle_type, ProbeVerdict.COULD_NOT_TEST,
                               [] if self.keep_tests else None)

        LOGGER.info("%s: starting evaluation of %d configurations",
                    self.family.name, len(configurations))
        results = self._run_pass(self._initial_pass, configurations)
        tests = [test for test, _ in results]
        LOGGER.info("%s: finished evaluation", self.family.name)

        potentially_vulnerable = any(test.distinct_answers for test in tests)
        if potentially_vulnerable or self.scan_detail >= ScanDetail.NORMAL:
            to_extend = [test for test, usable in results
                         if usable and self.extended_iterations and
                         (test.distinct_answers or
                          self.scan_detail >= ScanDetail.DETAILED)]
            LOGGER.info("%s: starting extended evaluation of %d "
                        "configurations", self.family.name, len(to_extend))
            self._run_pass(self._extended_pass, to_extend)
            LOGGER.info("%s: finished extended evaluation",
                        self.family.name)

        for test in tests:
            verdict = test.finalize(len(test.response_maps),
                                    self.significance_rule)
            LOGGER.debug("%s: %s", self.family.describe(test.configuration),
                         ProbeVerdict.toStr(verdict))

        verdict = reduce_verdicts(test.verdict for test in tests)
        LOGGER.info("%s: %s", self.family.name, ProbeVerdict.toStr(verdict))
        return ProbeResult(self.oracle_type, verdict,
                           tests if self.keep_tests else None)
