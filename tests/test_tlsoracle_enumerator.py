# Author: tlsoracle developers, (c) 2026
# Released under Gnu GPL v2.0, see LICENSE file for details

import unittest

from tlslite.constants import CipherSuite

from tlsoracle.constants import OracleType, ScanDetail, PaddingVectorType, \
        PaddingRecordType, BleichenbacherWorkflowType, \
        MasterSecretWorkflowType, RecordGeneratorType
from tlsoracle.enumerator import Capabilities, enumerate_configurations, \
        get_family, is_cbc_suite, is_psk_suite
from tlsoracle.vectors import TestConfiguration


CBC = CipherSuite.TLS_RSA_WITH_AES_128_CBC_SHA
GCM = CipherSuite.TLS_RSA_WITH_AES_128_GCM_SHA256
DHE_CBC = CipherSuite.TLS_DHE_RSA_WITH_AES_128_CBC_SHA
ECDHE_CBC = CipherSuite.TLS_ECDHE_RSA_WITH_AES_128_CBC_SHA
RC4 = CipherSuite.TLS_RSA_WITH_RC4_128_SHA
TLS13 = CipherSuite.TLS_AES_128_GCM_SHA256


class TestSuiteFilters(unittest.TestCase):
    def test_is_cbc_suite(self):
        self.assertTrue(is_cbc_suite(CBC))
        self.assertTrue(is_cbc_suite(DHE_CBC))
        self.assertTrue(is_cbc_suite(ECDHE_CBC))
        self.assertFalse(is_cbc_suite(GCM))
        self.assertFalse(is_cbc_suite(RC4))
        self.assertFalse(is_cbc_suite(TLS13))

    def test_is_psk_suite(self):
        self.assertFalse(is_psk_suite(CBC))
        self.assertFalse(is_psk_suite(0xfefe))


class TestEnumerateConfigurations(unittest.TestCase):
    def setUp(self):
        self.capabilities = Capabilities(
            [((3, 0), [CBC]),
             ((3, 3), [CBC, GCM, DHE_CBC, ECDHE_CBC, RC4]),
             ((3, 4), [TLS13])])

    def test_padding_oracle_quick(self):
        configs = enumerate_configurations(self.capabilities,
                                           ScanDetail.QUICK,
                                           OracleType.PADDING_ORACLE)

        self.assertEqual(configs, [
            TestConfiguration((3, 3), CBC, PaddingVectorType.FINISHED,
                              PaddingRecordType.VERY_SHORT),
            TestConfiguration((3, 3), DHE_CBC, PaddingVectorType.FINISHED,
                              PaddingRecordType.VERY_SHORT),
            TestConfiguration((3, 3), ECDHE_CBC, PaddingVectorType.FINISHED,
                              PaddingRecordType.VERY_SHORT)])

    def test_padding_oracle_normal_uses_short_records(self):
        configs = enumerate_configurations(self.capabilities,
                                           ScanDetail.NORMAL,
                                           OracleType.PADDING_ORACLE)

        self.assertEqual(set(i.record_kind for i in configs),
                         set([PaddingRecordType.SHORT]))

    def test_padding_oracle_with_application_data(self):
        self.capabilities.sends_application_data = True

        configs = enumerate_configurations(self.capabilities,
                                           ScanDetail.DETAILED,
                                           OracleType.PADDING_ORACLE)

        self.assertEqual(len(configs), 6)
        self.assertEqual([i.vector_kind for i in configs],
                         [PaddingVectorType.FINISHED] * 3 +
                         [PaddingVectorType.CLASSIC_DYNAMIC] * 3)

    def test_padding_oracle_all(self):
        self.capabilities.sends_application_data = True

        configs = enumerate_configurations(self.capabilities,
                                           ScanDetail.ALL,
                                           OracleType.PADDING_ORACLE)

        self.assertEqual(len(configs), 9)
        self.assertIn(PaddingVectorType.CLOSE_NOTIFY,
                      set(i.vector_kind for i in configs))

    def test_padding_oracle_all_without_application_data(self):
        configs = enumerate_configurations(self.capabilities,
                                           ScanDetail.ALL,
                                           OracleType.PADDING_ORACLE)

        self.assertEqual(set(i.vector_kind for i in configs),
                         set([PaddingVectorType.FINISHED]))

    def test_bleichenbacher(self):
        configs = enumerate_configurations(self.capabilities,
                                           ScanDetail.NORMAL,
                                           OracleType.BLEICHENBACHER)

        self.assertEqual(set(i.cipher_suite for i in configs),
                         set([CBC, GCM, RC4]))
        self.assertEqual(len(configs), 9)
        self.assertEqual(set(i.record_kind for i in configs),
                         set([RecordGeneratorType.FAST]))
        self.assertEqual([i.vector_kind for i in configs[::3]],
                         [BleichenbacherWorkflowType.CKE_CCS_FIN,
                          BleichenbacherWorkflowType.CKE,
                          BleichenbacherWorkflowType.CKE_CCS])

    def test_bleichenbacher_all(self):
        configs = enumerate_configurations(self.capabilities,
                                           ScanDetail.ALL,
                                           OracleType.BLEICHENBACHER)

        self.assertEqual(len(configs), 12)
        self.assertEqual(set(i.record_kind for i in configs),
                         set([RecordGeneratorType.FULL]))
        self.assertEqual(configs[-1].vector_kind,
                         BleichenbacherWorkflowType.CKE_FIN)

    def test_master_secret(self):
        configs = enumerate_configurations(self.capabilities,
                                           ScanDetail.QUICK,
                                           OracleType.MASTER_SECRET)

        self.assertEqual(configs, [
            TestConfiguration((3, 3), DHE_CBC,
                              MasterSecretWorkflowType.CKE_CCS_FIN,
                              RecordGeneratorType.FAST)])

    def test_excludes_ssl_and_tls13(self):
        capabilities = Capabilities([((3, 0), [CBC, DHE_CBC]),
                                     ((2, 0), [CBC]),
                                     ((3, 4), [TLS13, CBC])])

        for oracle_type in (OracleType.PADDING_ORACLE,
                            OracleType.BLEICHENBACHER,
                            OracleType.MASTER_SECRET):
            self.assertEqual(
                enumerate_configurations(capabilities, ScanDetail.ALL,
                                         oracle_type), [])

    def test_no_capabilities(self):
        self.assertEqual(
            enumerate_configurations(Capabilities(), ScanDetail.ALL,
                                     OracleType.PADDING_ORACLE), [])

    def test_duplicates_collapsed(self):
        capabilities = Capabilities([([3, 1], [CBC, CBC]),
                                     ((3, 1), [CBC])])

        configs = enumerate_configurations(capabilities, ScanDetail.QUICK,
                                           OracleType.PADDING_ORACLE)

        self.assertEqual(len(configs), 1)
        self.assertEqual(configs[0].version, (3, 1))

    def test_unknown_oracle(self):
        with self.assertRaises(ValueError):
            enumerate_configurations(self.capabilities, ScanDetail.ALL, 7)


class TestOracleFamily(unittest.TestCase):
    def test_describe(self):
        family = get_family(OracleType.BLEICHENBACHER)
        config = TestConfiguration((3, 3), CBC,
                                   BleichenbacherWorkflowType.CKE,
                                   RecordGeneratorType.FULL)

        self.assertEqual(family.describe(config),
                         "Bleichenbacher oracle: (3, 3) "
                         "TLS_RSA_WITH_AES_128_CBC_SHA CKE FULL")

    def test_record_kind(self):
        family = get_family(OracleType.PADDING_ORACLE)

        self.assertEqual(family.record_kind(ScanDetail.QUICK),
                         PaddingRecordType.VERY_SHORT)
        self.assertEqual(family.record_kind(ScanDetail.NORMAL),
                         PaddingRecordType.SHORT)
