# Author: tlsoracle developers, (c) 2026
# Released under Gnu GPL v2.0, see LICENSE file for details

"""Accumulation of measurement runs of a single configuration."""

import logging
from collections import defaultdict

import numpy as np
from scipy import stats

from .constants import EqualityError, ProbeVerdict, LeakTestState
from .fingerprint import compare, compare_all


LOGGER = logging.getLogger(__name__)


class InconsistentMeasurement(ValueError):

    """Response map does not match the vectors of the earlier runs"""

    pass


class InformationLeakTest(object):
    """
    Evidence collected for a single configuration.

    The first measurement run is the reference: the difference found
    between vectors in it is kept as
    :py:attr:`reference_error` and all later runs (extensions) are compared
    against it. Runs are only ever appended, never removed.

    :ivar TestConfiguration configuration: tested configuration
    :ivar list response_maps: collected
        :py:class:`~tlsoracle.vectors.ResponseMap` objects, in order of
        measurement
    :ivar int reference_error: difference found in the first run
    :ivar bool distinct_answers: True if the peer answered differently to
        different vectors in the first run
    :ivar bool shaky: True if any of the later runs contradicted the first
        one
    :ivar bool erroneous: True if any of the vectors couldn't be measured
    :ivar bool significant: True if the difference was confirmed, valid
        only after :py:meth:`finalize`
    :ivar int verdict: :py:class:`~tlsoracle.constants.ProbeVerdict`,
        valid only after :py:meth:`finalize`
    """

    def __init__(self, configuration):
        self.configuration = configuration
        self.response_maps = []
        self.state = LeakTestState.NEW
        self.reference_error = None
        self.distinct_answers = False
        self.shaky = False
        self.erroneous = False
        self.significant = False
        self.verdict = None

    @property
    def reference_map(self):
        """The first measurement run, None if nothing was measured yet."""
        if not self.response_maps:
            return None
        return self.response_maps[0]

    def add_response_map(self, response_map):
        """
        Append a measurement run and update the derived state.

        :raises InconsistentMeasurement: when the vectors of the run are
            different from the vectors of the first run
        :raises ValueError: when the test was already finalized
        """
        if self.state == LeakTestState.FINALIZED:
            raise ValueError("Can't extend a finalized test")

        if self.state == LeakTestState.NEW:
            self._check_absent(response_map)
            self.response_maps.append(response_map)
            self.state = LeakTestState.MEASURED
            self.reference_error = compare_all(response_map)
            self.distinct_answers = not self.erroneous and \
                self.reference_error not in (EqualityError.NONE,
                                             EqualityError.UNRESOLVED)
            LOGGER.debug("Reference run of %s: %s", self.configuration,
                         EqualityError.toStr(self.reference_error))
            return

        reference = self.response_maps[0]
        if response_map.vectors != reference.vectors:
            raise InconsistentMeasurement(
                "Vectors of run {0} of {1} don't match the first run"
                .format(len(self.response_maps), self.configuration))
        self._check_absent(response_map)
        self.response_maps.append(response_map)

        if not self._confirms(reference, response_map):
            LOGGER.warning("Rescan[%d] of %s shows different results",
                           len(self.response_maps) - 1, self.configuration)
            self.shaky = True
        else:
            LOGGER.debug("Rescan[%d] of %s shows same results",
                         len(self.response_maps) - 1, self.configuration)

    def _check_absent(self, response_map):
        if response_map.has_absent():
            LOGGER.warning("Missing fingerprints for %s",
                           self.configuration)
            self.erroneous = True

    def extend(self, response_maps):
        """Append several measurement runs, in order."""
        for response_map in response_maps:
            self.add_response_map(response_map)

    def _confirms(self, reference, response_map):
        """Check if the run shows the same behaviour as the reference."""
        error = compare_all(response_map)
        if error != EqualityError.UNRESOLVED and \
                error != self.reference_error:
            return False
        for (vector, old), (_, new) in zip(reference, response_map):
            result = compare(old, new)
            if result in (EqualityError.NONE, EqualityError.UNRESOLVED):
                continue
            LOGGER.debug("Vector \"%s\" changed between runs: %s",
                         vector.name, EqualityError.toStr(result))
            return False
        return True

    def response_counts(self):
        """
        Count how often every distinct response was seen for every vector.

        Absent fingerprints are not counted.

        :rtype: numpy.ndarray
        :return: contingency table, one row per vector, one column per
            distinct fingerprint
        """
        if not self.response_maps:
            return np.zeros((0, 0), dtype=int)
        columns = {}
        counts = defaultdict(lambda: defaultdict(int))
        for response_map in self.response_maps:
            for vector, fingerprint in response_map:
                if fingerprint is None:
                    continue
                columns.setdefault(fingerprint, len(columns))
                counts[vector.index][columns[fingerprint]] += 1
        vectors = self.response_maps[0].vectors
        table = np.zeros((len(vectors), len(columns)), dtype=int)
        for row, vector in enumerate(vectors):
            for column, count in counts[vector.index].items():
                table[row, column] = count
        return table

    def p_value(self):
        """
        Probability that the responses don't depend on the vector sent.

        Uses the Fisher exact test for two vectors with two distinct
        responses, chi-squared test of independence otherwise.
        """
        table = self.response_counts()
        table = table[table.sum(axis=1) > 0]
        if table.shape[0] < 2 or table.shape[1] < 2:
            return 1.0
        if table.shape == (2, 2):
            _, pval = stats.fisher_exact(table)
        else:
            _, pval, _, _ = stats.chi2_contingency(table)
        return float(pval)

    def finalize(self, minimum_runs=1, significance_rule=None):
        """
        Decide the verdict for the configuration.

        :param int minimum_runs: how many measurement runs need to be
            present for the verdict to be valid
        :param callable significance_rule: additional check of a test with
            distinct answers, called with the test as the only parameter,
            see :py:class:`StatisticalSignificance`
        :raises ValueError: when fewer runs than required were collected
        :rtype: int
        :return: :py:class:`~tlsoracle.constants.ProbeVerdict`
        """
        if self.state == LeakTestState.NEW:
            raise ValueError("Can't finalize a test without measurements")
        if len(self.response_maps) < minimum_runs:
            raise ValueError("Test has {0} runs, {1} required"
                             .format(len(self.response_maps), minimum_runs))

        self.significant = self.distinct_answers and not self.shaky \
            and not self.erroneous
        if self.significant and significance_rule is not None:
            self.significant = bool(significance_rule(self))

        if self.erroneous:
            self.verdict = ProbeVerdict.COULD_NOT_TEST
        elif self.shaky:
            self.verdict = ProbeVerdict.UNCERTAIN
        elif self.significant:
            self.verdict = ProbeVerdict.TRUE
        else:
            self.verdict = ProbeVerdict.FALSE
        self.state = LeakTestState.FINALIZED
        return self.verdict

    def summary(self):
        """Return a dictionary describing the test, for reporting."""
        return {"configuration": self.configuration,
                "runs": len(self.response_maps),
                "reference_error": EqualityError.toStr(self.reference_error)
                                   if self.reference_error is not None
                                   else None,
                "distinct_answers": self.distinct_answers,
                "shaky": self.shaky,
                "erroneous": self.erroneous,
                "significant": self.significant,
                "verdict": ProbeVerdict.toStr(self.verdict)
                           if self.verdict is not None else None}

    def __repr__(self):
        return ("InformationLeakTest(configuration={0!r}, runs={1}, "
                "state={2})").format(self.configuration,
                                     len(self.response_maps),
                                     LeakTestState.toStr(self.state))


class StatisticalSignificance(object):
    """
    Accept differences only when unlikely to be caused by chance.

    :ivar float alpha: acceptable probability of a false positive
    """

    def __init__(self, alpha=None):
        if alpha is None:
            alpha = 0.05
        if not 0 < alpha < 1:
            raise ValueError("alpha must be between 0 and 1")
        self.alpha = alpha

    def __call__(self, test):
        pval = test.p_value()
        LOGGER.debug("%s: p-value %.3g", test.configuration, pval)
        return pval < self.alpha
