"""Title extraction: boil task text down to a short label.

Runs as a list of (pattern, replacement) cleanup steps over the link-free
text, then truncates to a word boundary. Falls back to the leading letter
runs of the text, and finally to a fixed default.
"""

import re

from task_pipeline.extractors.temporal import TEMPORAL_PHRASE_PATTERNS

MAX_TITLE_LENGTH = 25
MIN_TITLE_LENGTH = 2
FALLBACK_KEYWORD_COUNT = 3
DEFAULT_TITLE = "新任务"

# Filler verbs, particles and connectives. Longer words first so that
# 需要 is not reduced to 需 by the shorter 要.
CHINESE_FILLER_WORDS = [
    "别忘了", "需要", "记得", "完成", "提交", "参加", "为了", "关于",
    "进行", "开始", "结束", "准备", "安排",
    "前", "要", "去", "到", "在", "和", "与", "跟", "给",
    "的", "了", "是", "有", "会", "将", "把", "被", "让", "使", "做",
]

ENGLISH_FILLER_WORDS = [
    "remember", "please", "need", "needs", "must", "should", "will",
    "have", "has", "to", "the", "a", "an", "at", "on", "in", "for",
    "of", "and", "with", "by", "before",
]

CHINESE_FILLER_PATTERN = re.compile("|".join(CHINESE_FILLER_WORDS))
ENGLISH_FILLER_PATTERN = re.compile(
    r"(?<![a-z])(?:" + "|".join(ENGLISH_FILLER_WORDS) + r")(?![a-z])",
    re.I,
)
PUNCTUATION_PATTERN = re.compile(r"[，。！？；：、“”‘’\"'（）【】《》]")
WHITESPACE_PATTERN = re.compile(r"\s+")
LETTER_RUN_PATTERN = re.compile(r"[a-zA-Z\u4e00-\u9fa5]{2,}")

TITLE_CLEANUP_STEPS: list[tuple[re.Pattern, str]] = [
    *[(pattern, "") for pattern in TEMPORAL_PHRASE_PATTERNS],
    (CHINESE_FILLER_PATTERN, ""),
    (ENGLISH_FILLER_PATTERN, ""),
    (PUNCTUATION_PATTERN, " "),
    (WHITESPACE_PATTERN, " "),
]


def clean_title_text(text: str) -> str:
    """Strip temporal phrases, filler and punctuation; collapse whitespace."""
    for pattern, replacement in TITLE_CLEANUP_STEPS:
        text = pattern.sub(replacement, text)
    return text.strip()


def truncate_title(text: str, max_length: int = MAX_TITLE_LENGTH) -> str:
    """Keep whole words while they fit, else hard-cut."""
    if len(text) <= max_length:
        return text

    result = ""
    for word in text.split(" "):
        candidate = f"{result} {word}" if result else word
        if len(candidate) > max_length:
            break
        result = candidate

    return result or text[:max_length]


def keyword_title(text: str, max_length: int = MAX_TITLE_LENGTH) -> str:
    """Join the first few letter runs (Latin or CJK) of the text."""
    keywords = LETTER_RUN_PATTERN.findall(text)[:FALLBACK_KEYWORD_COUNT]
    return " ".join(keywords)[:max_length]


def extract_title(text: str) -> str:
    """Short (<= 25 chars), never-empty title for link-free task text."""
    title = truncate_title(clean_title_text(text))

    if len(title) < MIN_TITLE_LENGTH:
        title = keyword_title(text) or title

    return title or DEFAULT_TITLE
