from __future__ import annotations

from unittest.mock import MagicMock, patch

from clinic_import.services.progress import LoadProgress


def test_no_bar_without_tty():
    with patch("clinic_import.services.progress.is_tty_enabled", return_value=False):
        with LoadProgress("bp_logs", 1200) as progress:
            progress("bp_logs", 500)
            progress("bp_logs", 1000)
            assert progress.pbar is None
            assert progress.inserted == 1000


def test_bar_advances_by_delta_on_tty():
    bar = MagicMock()
    with patch("clinic_import.services.progress.is_tty_enabled", return_value=True), \
            patch("clinic_import.services.progress.tqdm", return_value=bar) as tqdm_cls:
        with LoadProgress("bp_logs", 1200) as progress:
            progress("bp_logs", 500)
            progress("bp_logs", 1000)
            progress("bp_logs", 1200)
    tqdm_cls.assert_called_once()
    assert tqdm_cls.call_args.kwargs["total"] == 1200
    assert [c.args[0] for c in bar.update.call_args_list] == [500, 500, 200]
    bar.close.assert_called_once()
