# Author: tlsoracle developers, (c) 2026
# Released under Gnu GPL v2.0, see LICENSE file for details

"""Selection of configurations worth testing for a given oracle."""

import logging
from collections import namedtuple

from tlslite.constants import CipherSuite

from .constants import OracleType, ScanDetail, PaddingVectorType, \
        PaddingRecordType, BleichenbacherWorkflowType, \
        MasterSecretWorkflowType, RecordGeneratorType
from .vectors import TestConfiguration


LOGGER = logging.getLogger(__name__)


TLS_VERSIONS_WITH_RSA_AND_CBC = ((3, 1), (3, 2), (3, 3))
"""TLS 1.0, TLS 1.1 and TLS 1.2; SSL and TLS 1.3 are never tested."""


_BLOCK_CIPHERS = ("aes128", "aes256", "3des", "camellia128", "camellia256")


class Capabilities(object):
    """
    What earlier probes established about the peer.

    :ivar list version_suites: list of ``(version, [cipher suites])``
        pairs, as negotiated with the peer
    :ivar bool sends_application_data: whether the peer sent application
        data in a regular connection
    """

    def __init__(self, version_suites=None, sends_application_data=False):
        self.version_suites = list(version_suites or [])
        self.sends_application_data = sends_application_data


def is_cbc_suite(suite):
    """Check if cipher suite uses a block cipher in CBC mode."""
    return CipherSuite.canonicalMacName(suite) is not None and \
        CipherSuite.canonicalCipherName(suite) in _BLOCK_CIPHERS


def is_psk_suite(suite):
    """Check if cipher suite uses a pre-shared key exchange."""
    return "_PSK_" in CipherSuite.ietfNames.get(suite, "")


def _padding_suites(suite):
    return is_cbc_suite(suite) and not is_psk_suite(suite)


def _rsa_suites(suite):
    return suite in CipherSuite.certSuites


def _dh_suites(suite):
    return suite in CipherSuite.dhAllSuites


def _padding_vectors(capabilities, scan_detail):
    kinds = [PaddingVectorType.FINISHED]
    if capabilities.sends_application_data:
        kinds.append(PaddingVectorType.CLASSIC_DYNAMIC)
        if scan_detail == ScanDetail.ALL:
            kinds.append(PaddingVectorType.CLOSE_NOTIFY)
    return kinds


def _bleichenbacher_vectors(capabilities, scan_detail):
    kinds = [BleichenbacherWorkflowType.CKE_CCS_FIN,
             BleichenbacherWorkflowType.CKE,
             BleichenbacherWorkflowType.CKE_CCS]
    if scan_detail == ScanDetail.ALL:
        kinds.append(BleichenbacherWorkflowType.CKE_FIN)
    return kinds


def _master_secret_vectors(capabilities, scan_detail):
    kinds = [MasterSecretWorkflowType.CKE_CCS_FIN]
    if capabilities.sends_application_data:
        kinds.append(MasterSecretWorkflowType.CKE_CCS_FIN_APP_DATA)
    if scan_detail == ScanDetail.ALL:
        kinds.append(MasterSecretWorkflowType.CKE_CCS)
    return kinds


class OracleFamily(namedtuple('OracleFamily',
                              'name oracle_type versions suite_filter '
                              'vector_kinds vector_enum record_kinds '
                              'record_enum fine_record_detail')):
    """
    Eligibility rules for a family of oracles.

    :ivar str name: human readable name
    :ivar int oracle_type: :py:class:`~tlsoracle.constants.OracleType`
    :ivar tuple versions: protocol versions that can be tested
    :ivar callable suite_filter: returns True for suites that can be tested
    :ivar callable vector_kinds: returns the vector kinds to use for given
        capabilities and scan detail
    :ivar vector_enum: enum class of the vector kinds
    :ivar tuple record_kinds: the coarse and the fine record kind
    :ivar record_enum: enum class of the record kinds
    :ivar int fine_record_detail: lowest scan detail using the fine
        record kind
    """

    __slots__ = ()

    def record_kind(self, scan_detail):
        """Select record kind for the scan detail."""
        if scan_detail >= self.fine_record_detail:
            return self.record_kinds[1]
        return self.record_kinds[0]

    def describe(self, configuration):
        """Return human readable description of a configuration."""
        return "{0}: {1} {2} {3} {4}".format(
            self.name,
            configuration.version,
            CipherSuite.ietfNames.get(configuration.cipher_suite,
                                      hex(configuration.cipher_suite)),
            self.vector_enum.toStr(configuration.vector_kind),
            self.record_enum.toStr(configuration.record_kind))


ORACLE_FAMILIES = {
    OracleType.PADDING_ORACLE: OracleFamily(
        "Padding oracle",
        OracleType.PADDING_ORACLE,
        TLS_VERSIONS_WITH_RSA_AND_CBC,
        _padding_suites,
        _padding_vectors,
        PaddingVectorType,
        (PaddingRecordType.VERY_SHORT, PaddingRecordType.SHORT),
        PaddingRecordType,
        ScanDetail.NORMAL),
    OracleType.BLEICHENBACHER: OracleFamily(
        "Bleichenbacher oracle",
        OracleType.BLEICHENBACHER,
        TLS_VERSIONS_WITH_RSA_AND_CBC,
        _rsa_suites,
        _bleichenbacher_vectors,
        BleichenbacherWorkflowType,
        (RecordGeneratorType.FAST, RecordGeneratorType.FULL),
        RecordGeneratorType,
        ScanDetail.ALL),
    OracleType.MASTER_SECRET: OracleFamily(
        "Master secret oracle",
        OracleType.MASTER_SECRET,
        TLS_VERSIONS_WITH_RSA_AND_CBC,
        _dh_suites,
        _master_secret_vectors,
        MasterSecretWorkflowType,
        (RecordGeneratorType.FAST, RecordGeneratorType.FULL),
        RecordGeneratorType,
        ScanDetail.ALL),
}
"""Rules for all supported oracle types."""


def get_family(oracle_type):
    """Return the :py:class:`OracleFamily` for an oracle type."""
    try:
        return ORACLE_FAMILIES[oracle_type]
    except KeyError:
        raise ValueError("Unknown oracle type: {0}".format(oracle_type))


def enumerate_configurations(capabilities, scan_detail, oracle_type):
    """
    List configurations that should be tested for the oracle.

    Only the protocol versions and cipher suites the peer is known to
    support are used. The vector kinds are the outermost loop, followed by
    versions and cipher suites in the order they were reported in.

    :param Capabilities capabilities: what is known about the peer
    :param int scan_detail: :py:class:`~tlsoracle.constants.ScanDetail`
    :param int oracle_type: :py:class:`~tlsoracle.constants.OracleType`
    :rtype: list of TestConfiguration
    """
    family = get_family(oracle_type)
    record_kind = family.record_kind(scan_detail)

    eligible = []
    for version, suites in capabilities.version_suites:
        version = tuple(version)
        if version not in family.versions:
            continue
        for suite in suites:
            if (version, suite) in eligible or not family.suite_filter(suite):
                continue
            eligible.append((version, suite))

    if not eligible:
        LOGGER.info("%s: no eligible version and cipher suite pairs",
                    family.name)
        return []

    configurations = []
    for vector_kind in family.vector_kinds(capabilities, scan_detail):
        for version, suite in eligible:
            configurations.append(TestConfiguration(version, suite,
                                                    vector_kind,
                                                    record_kind))
    LOGGER.debug("%s: %d configurations to test", family.name,
                 len(configurations))
    return configurations
