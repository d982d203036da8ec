"""
Library detecting response oracles in TLS clients and servers.

Use :py:func:`tlsoracle.enumerator.enumerate_configurations` to find the
configurations that can be tested for a given oracle type, the
:py:class:`tlsoracle.leak.InformationLeakTest` to collect evidence for a
single configuration and :py:class:`tlsoracle.scanner.AdaptiveOracleScanner`
to run the whole probe against a
:py:class:`tlsoracle.measurement.MeasurementExecutor`.

Responses of the peer are summarised as
:py:class:`~tlsoracle.fingerprint.ResponseFingerprint` objects and compared
with :py:func:`~tlsoracle.fingerprint.compare` and
:py:func:`~tlsoracle.fingerprint.compare_all`.
"""
# Author: tlsoracle developers, (c) 2026
# Released under Gnu GPL v2.0, see LICENSE file for details
