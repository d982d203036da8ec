# Author: tlsoracle developers, (c) 2026
# Released under Gnu GPL v2.0, see LICENSE file for details

from threading import Event, Thread
import unittest
import unittest.mock as mock

from tlsoracle.utils.progress_report import _format_seconds, \
        format_status, progress_report


class TestFormatSeconds(unittest.TestCase):
    def test_seconds(self):
        self.assertEqual(_format_seconds(7.5), " 7.50s")

    def test_hours(self):
        self.assertEqual(_format_seconds(60 * 60 * 4),
                         " 4h  0m  0.00s")

    def test_minutes(self):
        self.assertEqual(_format_seconds(60 * 15), "15m  0.00s")

    def test_all(self):
        self.assertEqual(_format_seconds(
            60 * 60 * 5 +
            60 * 14 +
            7), " 5h 14m  7.00s")


class TestFormatStatus(unittest.TestCase):
    def test_half_done(self):
        self.assertEqual(format_status(5, 10, 20, ' conf'),
                         "Done: 5/10 conf ( 50.00%), elapsed: 20.00s, "
                         "remaining: 20.00s")

    def test_nothing_done(self):
        self.assertIn("Done: 0/4 (  0.00%)", format_status(0, 4, 1))


class TestInvalidInputs(unittest.TestCase):
    def test_wrong_status(self):
        with self.assertRaises(ValueError) as e:
            progress_report([0, 1, 2, 3])

        self.assertIn("status is not a 3 element", str(e.exception))


class TestOperation(unittest.TestCase):
    @mock.patch("builtins.print")
    def test_progress(self, mock_print):
        status = [2, 10, Event()]
        params = {'delay': 0.001, 'unit': ' conf'}
        progress = Thread(target=progress_report, args=(status,),
                          kwargs=params)
        progress.start()
        while not mock_print.mock_calls:
            pass
        status[0] = 10
        while '10/10' not in str(mock_print.mock_calls[-1]):
            pass
        status[2].set()
        progress.join()
        self.assertIn('Done: 2/10 conf ( 20.00%)',
                      str(mock_print.mock_calls[0]))
        self.assertIn('Done: 10/10 conf (100.00%)',
                      str(mock_print.mock_calls[-1]))
        self.assertEqual(mock_print.mock_calls[-1][2], {'end': '\r'})

    @mock.patch("builtins.print")
    def test_with_newlines(self, mock_print):
        status = [0, 1, Event()]
        status[2].set()

        progress_report(status, end='\n')

        self.assertEqual(len(mock_print.mock_calls), 1)
        self.assertEqual(mock_print.mock_calls[0][2], {'end': '\n'})
