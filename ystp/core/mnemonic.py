"""
口令生成器 - 从固定词表中随机抽词组成会话口令
"""

import logging
import random
import secrets
from typing import Optional, Sequence

from .words import WORDS

logger = logging.getLogger(__name__)

DEFAULT_WORD_COUNT = 5
DEFAULT_SEPARATOR = "-"


class MnemonicGenerator:
    """
    会话口令生成器

    每个位置独立地从词表中均匀随机抽取一个词(有放回)，再用分隔符连接。
    不检查口令是否与正在使用的会话冲突，冲突会在发送方接入时表现为会话冲突。
    """

    def __init__(self,
                 words: Sequence[str] = WORDS,
                 word_count: int = DEFAULT_WORD_COUNT,
                 separator: str = DEFAULT_SEPARATOR,
                 rng: Optional[random.Random] = None):
        """
        初始化口令生成器

        Args:
            words: 固定的非空有序词表
            word_count: 每个口令包含的词数，必须为正整数
            separator: 词之间的分隔符
            rng: 随机数生成器，默认使用系统安全随机源

        Raises:
            ValueError: 词表为空或词数不是正整数
        """
        if not words:
            raise ValueError("词表不能为空")
        if word_count < 1:
            raise ValueError(f"词数必须为正整数: {word_count}")

        self.words = tuple(words)
        self.word_count = word_count
        self.separator = separator
        self.rng = rng or secrets.SystemRandom()

    def generate(self) -> str:
        """生成一个新口令"""
        code = self.separator.join(self.rng.choice(self.words) for _ in range(self.word_count))
        logger.debug(f"已生成口令，词数: {self.word_count}")
        return code


_default_generator = MnemonicGenerator()


def mnemonic() -> str:
    """使用默认配置(5个词，连字符分隔)生成口令"""
    return _default_generator.generate()
