"""Category classifier with bilingual keyword families.

Families are tested in declaration order (study, work, personal); the
first family with any matching term decides. Nothing matches -> other.
Matching is a case-insensitive substring test so that terms still hit
inside unspaced mixed text such as "明天meeting".
"""

import re

from task_pipeline.models import Category

# Ordered: earlier families win when several match
CATEGORY_KEYWORDS: dict[Category, list[str]] = {
    Category.STUDY: [
        # Coursework
        "作业", "homework", "assignment", "习题", "练习",
        "考试", "exam", "测验", "quiz",
        # Classes
        "上课", "class", "课程", "course", "讲座", "lecture",
        "教材", "书本", "笔记", "note",
        # Study habits
        "学习", "study", "预习", "复习", "背书", "记忆",
        # Research
        "论文", "paper", "实验", "lab", "毕业设计", "研究", "讨论",
        # People
        "导师", "教授", "同学",
    ],
    Category.WORK: [
        # Meetings
        "会议", "开会", "meeting",
        # Work itself
        "工作", "work", "项目", "project", "任务", "task",
        "报告", "report", "加班", "overtime", "办公", "office",
        # Job search
        "简历", "resume", "投递", "apply", "面试", "interview",
        "职场", "career", "薪资", "salary",
        # People and places
        "客户", "client", "同事", "colleague", "老板", "boss",
        "公司", "company",
    ],
    Category.PERSONAL: [
        # Social
        "约会", "date", "聚会", "party", "朋友", "friend",
        "家人", "family", "生日", "birthday", "吃饭", "dinner",
        # Errands
        "购物", "shopping", "电话", "call", "银行", "bank",
        "办理", "handle",
        # Health
        "医院", "hospital", "体检", "checkup", "健身", "gym",
        "运动", "exercise",
        # Leisure
        "旅行", "travel", "休息", "rest", "娱乐", "entertainment",
        "看电影", "movie",
    ],
}


def _compile_family(terms: list[str]) -> re.Pattern:
    """One alternation per family, longest terms first."""
    ordered = sorted(terms, key=len, reverse=True)
    return re.compile("|".join(re.escape(term) for term in ordered), re.I)


CATEGORY_PATTERNS: list[tuple[Category, re.Pattern]] = [
    (category, _compile_family(terms)) for category, terms in CATEGORY_KEYWORDS.items()
]


def classify_category(text: str) -> Category:
    """Return the first category family with a keyword present in text."""
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.search(text):
            return category
    return Category.OTHER


def matched_keywords(text: str) -> dict[Category, list[str]]:
    """All keywords found per family, for explaining a classification."""
    found: dict[Category, list[str]] = {}
    for category, pattern in CATEGORY_PATTERNS:
        hits = list(dict.fromkeys(m.group(0).lower() for m in pattern.finditer(text)))
        if hits:
            found[category] = hits
    return found
