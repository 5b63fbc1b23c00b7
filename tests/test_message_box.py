"""Tests for the two-slot message box."""

from stackblame.message_box import Message, MessageBox, Side


class TestMessageBoxAdd:
    def test_newest_first(self):
        box = MessageBox()
        box.add_message(Message("first", 3), Side.LEFT)
        box.add_message(Message("second", 3), Side.LEFT)
        assert box.left_text() == "second, first"
        assert box.right_text() == ""

    def test_same_message_moves_between_slots(self):
        """A message is never shown in two slots at once."""
        box = MessageBox()
        msg = Message("status", 3)
        box.add_message(msg, Side.LEFT)
        box.add_message(msg, Side.RIGHT)
        assert box.lhs == []
        assert box.rhs == [msg]

    def test_same_message_again_is_not_duplicated(self):
        box = MessageBox()
        msg = Message("status", 3)
        other = Message("other", 3)
        box.add_message(msg, Side.LEFT)
        box.add_message(other, Side.LEFT)
        box.add_message(msg, Side.LEFT)
        assert box.lhs == [msg, other]

    def test_equal_content_different_messages(self):
        box = MessageBox()
        box.add_message(Message("same", 3), Side.LEFT)
        box.add_message(Message("same", 3), Side.LEFT)
        assert box.left_text() == "same, same"

    def test_readding_resets_ticks(self):
        box = MessageBox()
        msg = Message("status", 2)
        box.add_message(msg, Side.LEFT)
        box.tick()
        assert msg.ticks_left == 1
        box.add_message(msg, Side.LEFT)
        assert msg.ticks_left == 2


class TestMessageBoxTick:
    def test_message_expires_after_ticks(self):
        box = MessageBox()
        box.add_message(Message("status", 2), Side.LEFT)

        assert box.tick() is False
        assert box.left_text() == "status"
        assert box.tick() is True
        assert box.left_text() == ""
        assert box.tick() is False

    def test_zero_ticks_removed_at_next_tick(self):
        box = MessageBox()
        box.add_message(Message("flash", 0), Side.RIGHT)
        assert box.right_text() == "flash"
        assert box.tick() is True
        assert box.right_text() == ""

    def test_negative_ticks_persist(self):
        box = MessageBox()
        usage = Message("usage", -1)
        box.add_message(usage, Side.RIGHT)
        for _ in range(100):
            assert box.tick() is False
        assert box.rhs == [usage]

    def test_tick_both_slots(self):
        box = MessageBox()
        box.add_message(Message("left", 1), Side.LEFT)
        box.add_message(Message("right", 3), Side.RIGHT)
        assert box.tick() is True
        assert box.left_text() == ""
        assert box.right_text() == "right"


class TestMessageBoxText:
    def test_text_right_aligned(self):
        box = MessageBox()
        box.add_message(Message("left", 5), Side.LEFT)
        box.add_message(Message("usage", -1), Side.RIGHT)
        text = box.text(20)
        assert len(text) == 20
        assert text.startswith("left ")
        assert text.endswith("usage")

    def test_text_narrow_width(self):
        box = MessageBox()
        box.add_message(Message("left", 5), Side.LEFT)
        box.add_message(Message("usage", -1), Side.RIGHT)
        assert box.text(3) == "leftusage"
