# Author: tlsoracle developers, (c) 2026
# Released under Gnu GPL v2.0, see LICENSE file for details

"""Enumerations shared by the oracle detection engine."""

from tlslite.constants import TLSEnum


class ScanDetail(TLSEnum):
    """
    How thorough the scan should be.

    Values are ordered, so ``detail >= ScanDetail.NORMAL`` reads as "at
    least normal detail".
    """

    QUICK = 0
    NORMAL = 1
    DETAILED = 2
    ALL = 3


class OracleType(TLSEnum):
    """Families of behavioural oracles the scanner can look for."""

    PADDING_ORACLE = 0
    BLEICHENBACHER = 1
    MASTER_SECRET = 2


class EqualityError(TLSEnum):
    """
    Result of comparing two response fingerprints.

    ``NONE`` is the only value meaning that the responses were
    indistinguishable, ``UNRESOLVED`` is returned when at least one of the
    compared fingerprints is missing.
    """

    NONE = 0
    UNRESOLVED = 1
    SOCKET_STATE = 2
    ALERT = 3
    MESSAGE_COUNT = 4
    MESSAGE_CONTENT = 5
    TIMING = 6


class ProbeVerdict(TLSEnum):
    """Outcome of a single configuration test or of a whole probe."""

    TRUE = 0
    FALSE = 1
    UNCERTAIN = 2
    COULD_NOT_TEST = 3


class LeakTestState(TLSEnum):
    """Life cycle of an information leak test."""

    NEW = 0
    MEASURED = 1
    FINALIZED = 2


class PaddingVectorType(TLSEnum):
    """Message carrying the manipulated CBC record."""

    FINISHED = 0
    CLASSIC_DYNAMIC = 1
    CLOSE_NOTIFY = 2


class PaddingRecordType(TLSEnum):
    """Amount of padding and MAC manipulations sent."""

    VERY_SHORT = 0
    SHORT = 1


class BleichenbacherWorkflowType(TLSEnum):
    """Messages sent after the malformed ClientKeyExchange."""

    CKE_CCS_FIN = 0
    CKE = 1
    CKE_CCS = 2
    CKE_FIN = 3


class MasterSecretWorkflowType(TLSEnum):
    """Messages sent after the ClientKeyExchange with a chosen DH share."""

    CKE_CCS_FIN = 0
    CKE_CCS_FIN_APP_DATA = 1
    CKE_CCS = 2


class RecordGeneratorType(TLSEnum):
    """Number of plaintext manipulations for the RSA and DH oracles."""

    FAST = 0
    FULL = 1
