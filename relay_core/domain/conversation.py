"""多模型会话状态。

每个已配置的模型各自维护一份只追加（append-only）的消息历史，
另有一个 active 下标表示轮到哪个模型发言。

- 外部输入（用户键入的消息）原样追加到所有历史。
- 某个模型的回答原样追加到它自己的历史，
  并以“角色反转”的副本追加到其余所有历史：assistant <-> user，system 不变。

这样在 N 个模型之间转述时，每个模型都把其他模型的发言看作“用户输入”。
"""

from dataclasses import dataclass, field
from typing import List, Tuple

from .models import ChatMessage, Role


_INVERTED_ROLES = {"assistant": "user", "user": "assistant"}


def invert_role(role: Role) -> Role:
    """assistant <-> user，其余角色（system）保持不变。"""

    return _INVERTED_ROLES.get(role, role)  # type: ignore[return-value]


def invert_message(message: ChatMessage) -> ChatMessage:
    return ChatMessage(role=invert_role(message.role), content=message.content)


@dataclass
class ConversationState:
    """N 份历史 + 轮转下标。不做持久化，进程退出即丢弃。"""

    model_count: int
    active: int = 0
    _histories: List[List[ChatMessage]] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if self.model_count < 1:
            raise ValueError("model_count must be >= 1")
        if not self._histories:
            self._histories = [[] for _ in range(self.model_count)]

    def history(self, index: int) -> Tuple[ChatMessage, ...]:
        return tuple(self._histories[index])

    @property
    def active_history(self) -> Tuple[ChatMessage, ...]:
        return self.history(self.active)

    def append_external(self, message: ChatMessage) -> None:
        """外部输入：每份历史追加同一条消息。"""

        for history in self._histories:
            history.append(message)

    def commit_turn(self, message: ChatMessage) -> None:
        """提交 active 模型的一轮回答并推进下标。

        作者自己的历史写入原消息，其他历史写入角色反转后的副本。
        """

        author = self.active
        for index, history in enumerate(self._histories):
            history.append(message if index == author else invert_message(message))
        self.active = (author + 1) % self.model_count
