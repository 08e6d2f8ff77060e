"""
Tests for user-visible notices.
"""

from jobboard.notify import ERROR, INFO, SUCCESS, Notifier


class TestNotifier:
    """Test recording and forwarding notices."""

    def test_history_in_order(self, logger):
        notifier = Notifier(logger=logger)
        notifier.success("Done", "ok")
        notifier.error("Oops", "failed")
        notifier.info("FYI", "soon")

        assert [n.level for n in notifier.history] == [SUCCESS, ERROR, INFO]
        assert notifier.last.title == "FYI"
        assert notifier.history[1].is_error

    def test_sink_receives_notices(self, logger):
        received = []
        notifier = Notifier(sink=received.append, logger=logger)

        notice = notifier.error("Oops", "failed")

        assert received == [notice]

    def test_clear(self, logger):
        notifier = Notifier(logger=logger)
        notifier.info("a", "b")
        notifier.clear()
        assert notifier.last is None
