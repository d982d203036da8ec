# Author: tlsoracle developers, (c) 2026
# Released under Gnu GPL v2.0, see LICENSE file for details

"""Summaries of peer reactions and the comparison between them."""

import logging
from itertools import combinations

from tlslite.constants import ContentType, HandshakeType, AlertLevel, \
        AlertDescription

from .constants import EqualityError


LOGGER = logging.getLogger(__name__)


def message_type(content_type, data):
    """
    Reduce a received record payload to the part that identifies it.

    Handshake messages are identified by content type and handshake type,
    everything else by the content type alone.

    :param int content_type: record layer content type
    :param bytearray data: record payload
    :rtype: tuple
    """
    if content_type == ContentType.handshake and data:
        return (content_type, data[0])
    return (content_type, None)


def describe_message_type(msg_type):
    """Return a human readable name of a message type tuple."""
    content_type, sub_type = msg_type
    if content_type == ContentType.handshake and sub_type is not None:
        return "Handshake({0})".format(HandshakeType.toStr(sub_type))
    return ContentType.toStr(content_type)


class ResponseFingerprint(object):
    """
    Snapshot of how the peer reacted to a single vector.

    Fingerprints are immutable, hashable and compare equal when every
    observed property is the same.

    :ivar bool socket_open: whether the connection was still open after
        the peer finished responding
    :ivar tuple alert: ``(level, description)`` of the first alert received,
        ``None`` if the peer didn't send any
    :ivar tuple message_types: types of all messages received, in order,
        see :py:func:`message_type`
    :ivar int timing_bucket: coarse response time class, ``None`` when
        timing was not captured
    """

    __slots__ = ('_socket_open', '_alert', '_message_types',
                 '_timing_bucket')

    def __init__(self, socket_open, alert=None, message_types=(),
                 timing_bucket=None):
        self._socket_open = bool(socket_open)
        self._alert = tuple(alert) if alert is not None else None
        self._message_types = tuple(tuple(i) for i in message_types)
        self._timing_bucket = timing_bucket

    @property
    def socket_open(self):
        return self._socket_open

    @property
    def alert(self):
        return self._alert

    @property
    def message_types(self):
        return self._message_types

    @property
    def timing_bucket(self):
        return self._timing_bucket

    @classmethod
    def from_messages(cls, messages, socket_open, response_time=None,
                      bucket_width=None):
        """
        Create fingerprint from the messages received from peer.

        :param list messages: :py:class:`tlslite.messages.Message` objects,
            in order of reception
        :param bool socket_open: state of the connection after the last
            message was received
        :param float response_time: time between sending the vector and
            the last response, in seconds
        :param float bucket_width: size of a timing bucket in seconds,
            timing is not recorded if unset
        """
        alert = None
        message_types = []
        for msg in messages:
            data = msg.write()
            if msg.contentType == ContentType.alert and alert is None \
                    and len(data) >= 2:
                alert = (data[0], data[1])
            message_types.append(message_type(msg.contentType, data))

        timing_bucket = None
        if response_time is not None and bucket_width:
            timing_bucket = int(response_time // bucket_width)

        return cls(socket_open, alert, message_types, timing_bucket)

    def _key(self):
        return (self._socket_open, self._alert, self._message_types,
                self._timing_bucket)

    def __eq__(self, other):
        if not isinstance(other, ResponseFingerprint):
            return NotImplemented
        return self._key() == other._key()

    def __ne__(self, other):
        ret = self.__eq__(other)
        if ret is NotImplemented:
            return ret
        return not ret

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return ("ResponseFingerprint(socket_open={0!r}, alert={1!r}, "
                "message_types={2!r}, timing_bucket={3!r})").format(
                    self._socket_open, self._alert, self._message_types,
                    self._timing_bucket)

    def __str__(self):
        if self._alert is None:
            alert = "no alert"
        else:
            alert = "Alert({0}, {1})".format(
                AlertLevel.toStr(self._alert[0]),
                AlertDescription.toStr(self._alert[1]))
        messages = ", ".join(describe_message_type(i)
                             for i in self._message_types)
        ret = "socket {0}, {1}, messages: [{2}]".format(
            "open" if self._socket_open else "closed", alert, messages)
        if self._timing_bucket is not None:
            ret += ", timing bucket: {0}".format(self._timing_bucket)
        return ret


def compare(fingerprint1, fingerprint2):
    """
    Classify the difference between two fingerprints.

    Properties are checked in order: socket state, alert, received
    messages and (only when both fingerprints carry it) timing. The first
    property that differs decides the result.

    :param ResponseFingerprint fingerprint1: first fingerprint or None
    :param ResponseFingerprint fingerprint2: second fingerprint or None
    :rtype: int
    :return: one of :py:class:`~tlsoracle.constants.EqualityError` values
    """
    if fingerprint1 is None or fingerprint2 is None:
        return EqualityError.UNRESOLVED
    if fingerprint1.socket_open != fingerprint2.socket_open:
        return EqualityError.SOCKET_STATE
    if fingerprint1.alert != fingerprint2.alert:
        return EqualityError.ALERT
    if len(fingerprint1.message_types) != len(fingerprint2.message_types):
        return EqualityError.MESSAGE_COUNT
    if fingerprint1.message_types != fingerprint2.message_types:
        return EqualityError.MESSAGE_CONTENT
    if fingerprint1.timing_bucket is not None and \
            fingerprint2.timing_bucket is not None and \
            fingerprint1.timing_bucket != fingerprint2.timing_bucket:
        return EqualityError.TIMING
    return EqualityError.NONE


def compare_all(response_map):
    """
    Look for any difference between responses inside a single run.

    Every pair of present fingerprints is compared, pairs are visited in
    ascending order of vector index.

    :param ResponseMap response_map: the measurement run to inspect
    :rtype: int
    :return: first difference found, ``EqualityError.NONE`` if all
        resolved pairs are equal, ``EqualityError.UNRESOLVED`` if no
        pair could be compared
    """
    present = sorted(((vector, fingerprint) for vector, fingerprint
                      in response_map if fingerprint is not None),
                     key=lambda pair: pair[0].index)
    resolved = False
    for (vector1, fp1), (vector2, fp2) in combinations(present, 2):
        error = compare(fp1, fp2)
        resolved = True
        if error != EqualityError.NONE:
            LOGGER.debug("Found %s between \"%s\" (%s) and \"%s\" (%s)",
                         EqualityError.toStr(error), vector1.name, fp1,
                         vector2.name, fp2)
            return error
    if not resolved:
        return EqualityError.UNRESOLVED
    return EqualityError.NONE
