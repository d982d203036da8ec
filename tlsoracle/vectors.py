# Author: tlsoracle developers, (c) 2026
# Released under Gnu GPL v2.0, see LICENSE file for details

"""Configurations under test, the vectors sent and the collected runs."""

from collections import namedtuple

from tlslite.constants import CipherSuite

from .constants import OracleType, PaddingVectorType, PaddingRecordType, \
        BleichenbacherWorkflowType, MasterSecretWorkflowType, \
        RecordGeneratorType


_VERSION_NAMES = {(2, 0): "SSLv2",
                  (3, 0): "SSLv3",
                  (3, 1): "TLSv1.0",
                  (3, 2): "TLSv1.1",
                  (3, 3): "TLSv1.2",
                  (3, 4): "TLSv1.3"}


def version_name(version):
    """Return the common name of a protocol version tuple."""
    return _VERSION_NAMES.get(tuple(version), str(tuple(version)))


class TestConfiguration(namedtuple('TestConfiguration',
                                   'version cipher_suite vector_kind '
                                   'record_kind')):
    """
    Identity of a single oracle test.

    :ivar tuple version: protocol version, like ``(3, 3)``
    :ivar int cipher_suite: IANA id of the cipher suite
    :ivar int vector_kind: which message carries the manipulation, value
        of the vector type enum of the tested oracle family
    :ivar int record_kind: how many manipulations are sent, value of the
        record type enum of the tested oracle family
    """

    __slots__ = ()

    def __str__(self):
        return "{0} {1} vector kind {2}, record kind {3}".format(
            version_name(self.version),
            CipherSuite.ietfNames.get(self.cipher_suite,
                                      hex(self.cipher_suite)),
            self.vector_kind, self.record_kind)


Vector = namedtuple('Vector', 'index name')
"""A single crafted input, ``index`` is its position in the sequence."""


# padding modifications, the first one is the valid reference
_PADDING_VERY_SHORT = ["valid padding and MAC",
                       "invalid last padding byte",
                       "invalid first padding byte",
                       "flipped MAC byte",
                       "missing MAC, valid padding"]

_PADDING_SHORT = ["padding 0x00 in every byte of a full block",
                  "padding length 0xff with short record",
                  "invalid middle padding byte",
                  "MAC and padding removed",
                  "record shorter than MAC"]

_BLEICHENBACHER_FAST = ["correctly formatted PKCS#1 PMS message",
                        "set PKCS#1 padding type to 3",
                        "no null separator in padding",
                        "zero byte in first byte of random padding",
                        "wrong TLS version (2, 2) in pre master secret"]

_BLEICHENBACHER_FULL = ["set PKCS#1 padding type to 1",
                        "zero byte in last byte of random padding",
                        "no null separator in encrypted value",
                        "too short (47-byte) pre master secret",
                        "too long (49-byte) pre master secret",
                        "very short (4-byte) pre master secret",
                        "wrong TLS version (0, 0) in pre master secret",
                        "too short PKCS padding",
                        "too long PKCS padding"]

_MASTER_SECRET_FAST = ["shared secret with leading zero byte",
                       "shared secret without leading zero byte"]

_MASTER_SECRET_FULL = ["shared secret with two leading zero bytes",
                       "shared secret with leading 0x01 byte"]


def _vector_names(oracle_type, vector_kind, record_kind):
    if oracle_type == OracleType.PADDING_ORACLE:
        if PaddingVectorType.toRepr(vector_kind) is None or \
                PaddingRecordType.toRepr(record_kind) is None:
            raise ValueError("Unknown padding oracle vector or record kind")
        names = list(_PADDING_VERY_SHORT)
        if record_kind == PaddingRecordType.SHORT:
            names += _PADDING_SHORT
        return names
    if oracle_type == OracleType.BLEICHENBACHER:
        if BleichenbacherWorkflowType.toRepr(vector_kind) is None or \
                RecordGeneratorType.toRepr(record_kind) is None:
            raise ValueError("Unknown Bleichenbacher workflow or record kind")
        names = list(_BLEICHENBACHER_FAST)
        if record_kind == RecordGeneratorType.FULL:
            names += _BLEICHENBACHER_FULL
        return names
    if oracle_type == OracleType.MASTER_SECRET:
        if MasterSecretWorkflowType.toRepr(vector_kind) is None or \
                RecordGeneratorType.toRepr(record_kind) is None:
            raise ValueError("Unknown master secret workflow or record kind")
        names = list(_MASTER_SECRET_FAST)
        if record_kind == RecordGeneratorType.FULL:
            names += _MASTER_SECRET_FULL
        return names
    raise ValueError("Unknown oracle type: {0}".format(oracle_type))


def vector_sequence(oracle_type, configuration):
    """
    Return the ordered vectors used for testing a configuration.

    The fine grained record kinds only append vectors to the ones sent with
    the coarse kinds, the order of the common part is the same.

    :param int oracle_type: :py:class:`~tlsoracle.constants.OracleType`
    :param TestConfiguration configuration: tested configuration
    :rtype: tuple of Vector
    """
    names = _vector_names(oracle_type, configuration.vector_kind,
                          configuration.record_kind)
    return tuple(Vector(i, name) for i, name in enumerate(names))


class ResponseMap(object):
    """
    Result of a single measurement run of a configuration.

    Keeps one fingerprint for every vector, in the order of the vector
    sequence. Fingerprints of vectors that could not be measured are
    ``None``.
    """

    __slots__ = ('_entries',)

    def __init__(self, entries):
        """
        :param iterable entries: ``(Vector, ResponseFingerprint)`` pairs
        """
        self._entries = tuple((vector, fingerprint)
                              for vector, fingerprint in entries)
        indexes = [vector.index for vector, _ in self._entries]
        if len(set(indexes)) != len(indexes):
            raise ValueError("Duplicate vector in response map")

    @classmethod
    def absent(cls, vectors):
        """Create a map for a run in which no vector could be measured."""
        return cls((vector, None) for vector in vectors)

    @property
    def vectors(self):
        """Vector identities, in order."""
        return tuple(vector for vector, _ in self._entries)

    @property
    def fingerprints(self):
        """Fingerprints, in order of vectors."""
        return tuple(fingerprint for _, fingerprint in self._entries)

    def get(self, vector):
        """Return fingerprint recorded for vector."""
        for vec, fingerprint in self._entries:
            if vec == vector:
                return fingerprint
        raise KeyError(vector)

    def has_absent(self):
        """Check if any of the vectors lacks a fingerprint."""
        return any(fingerprint is None for _, fingerprint in self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __len__(self):
        return len(self._entries)

    def __eq__(self, other):
        if not isinstance(other, ResponseMap):
            return NotImplemented
        return self._entries == other._entries

    def __ne__(self, other):
        ret = self.__eq__(other)
        if ret is NotImplemented:
            return ret
        return not ret

    def __hash__(self):
        return hash(self._entries)

    def __repr__(self):
        return "ResponseMap({0!r})".format(list(self._entries))
