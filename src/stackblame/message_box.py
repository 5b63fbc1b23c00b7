from dataclasses import dataclass, field
from enum import Enum


class Side(Enum):
    LEFT = "left"
    RIGHT = "right"


# Messages are compared by identity, so that posting the same message object again
# moves it instead of adding a copy.
@dataclass(eq=False)
class Message:
    content: str
    # Number of ticks the message is shown. 0: removed at the next tick, negative:
    # shown until replaced.
    ticks: int
    ticks_left: int = field(default=0, init=False)


def tick(messages: list[Message]) -> tuple[list[Message], bool]:
    update = False
    keep: list[Message] = []
    for msg in messages:
        if msg.ticks_left > 0:
            msg.ticks_left -= 1
        if msg.ticks_left != 0:
            keep.append(msg)
        else:
            update = True
    return keep, update


def remove(msg: Message, messages: list[Message]) -> list[Message]:
    return [m for m in messages if m is not msg]


def join(messages: list[Message]) -> str:
    return ", ".join(msg.content for msg in messages)


class MessageBox:
    """Transient status messages in a left and a right slot, newest first."""

    def __init__(self) -> None:
        self.lhs: list[Message] = []
        self.rhs: list[Message] = []

    def add_message(self, msg: Message, side: Side) -> None:
        self.lhs = remove(msg, self.lhs)
        self.rhs = remove(msg, self.rhs)
        msg.ticks_left = msg.ticks
        match side:
            case Side.LEFT:
                self.lhs.insert(0, msg)
            case Side.RIGHT:
                self.rhs.insert(0, msg)

    def tick(self) -> bool:
        # Returns True if a message was removed, so that the display must be updated.
        self.lhs, update_left = tick(self.lhs)
        self.rhs, update_right = tick(self.rhs)
        return update_left or update_right

    def left_text(self) -> str:
        return join(self.lhs)

    def right_text(self) -> str:
        return join(self.rhs)

    def text(self, width: int) -> str:
        rhs = self.right_text()
        space = max(width - len(rhs), 0)
        return f"{self.left_text():<{space}}{rhs}"
