# models/analysis_models.py

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

# -----------------------------------------
# 重大度・カテゴリ
# -----------------------------------------
Severity = Literal["error", "warning", "info"]

IssueCategory = Literal[
    "Meta Tags",
    "Content",
    "Images",
    "Structure",
    "Performance",
    "Accessibility",
]

# 表示順（issues_by_category の並び順）
ISSUE_CATEGORIES: tuple = (
    "Meta Tags",
    "Content",
    "Images",
    "Structure",
    "Performance",
    "Accessibility",
)

# スコア減点（1件あたり）
SEVERITY_PENALTY: Dict[str, int] = {
    "error": 15,
    "warning": 7,
    "info": 3,
}


class SEOIssue(BaseModel):
    """検出された問題 1 件。

    Attributes:
        type (Severity): 重大度。
        category (IssueCategory): 分類。
        message (str): 表示用メッセージ。
        fix (str | None): 自動修正 ID（修正不可なら None）。
    """

    type: Severity
    category: IssueCategory
    message: str
    fix: Optional[str] = None


class SEOMeta(BaseModel):
    """
    解析時に検出したシグナルのスナップショット。
    """
    title: Optional[str] = None
    description: Optional[str] = None

    has_viewport: bool = False
    has_charset: bool = False
    has_og_tags: bool = False
    has_og_title: bool = False
    has_og_desc: bool = False
    has_og_image: bool = False
    has_twitter_card: bool = False
    has_canonical: bool = False
    has_favicon: bool = False

    # "H2: text" 形式の見出しアウトライン（文書順）
    heading_structure: List[str] = Field(default_factory=list)

    image_count: int = 0
    images_with_alt: int = 0
    link_count: int = 0


class SEOAnalysis(BaseModel):
    """SEO 解析結果。

    score は issues から毎回計算される（compute_score）。
    """

    score: int = Field(0, ge=0, le=100)
    issues: List[SEOIssue] = Field(default_factory=list)
    meta: SEOMeta = Field(default_factory=SEOMeta)

    # ------------------------------
    # スコア計算
    # ------------------------------
    @staticmethod
    def compute_score(issues: List[SEOIssue]) -> int:
        """100 から重大度ごとの減点を引き、0〜100 に丸める。"""
        score = 100
        for issue in issues:
            score -= SEVERITY_PENALTY.get(issue.type, 0)
        return max(0, min(100, score))

    @classmethod
    def from_issues(cls, issues: List[SEOIssue], meta: SEOMeta) -> "SEOAnalysis":
        return cls(score=cls.compute_score(issues), issues=issues, meta=meta)

    @classmethod
    def empty(cls) -> "SEOAnalysis":
        """空の HTML に対するゼロ値の解析結果。"""
        return cls(score=0, issues=[], meta=SEOMeta())

    # ------------------------------
    # レポート用ヘルパ
    # ------------------------------
    def issues_by_category(self) -> Dict[str, List[SEOIssue]]:
        """カテゴリ別にグループ化する（全カテゴリを既定順で含む）。"""
        groups: Dict[str, List[SEOIssue]] = {cat: [] for cat in ISSUE_CATEGORIES}
        for issue in self.issues:
            groups.setdefault(issue.category, []).append(issue)
        return groups

    def fixable_issues(self) -> List[SEOIssue]:
        return [issue for issue in self.issues if issue.fix]

    @property
    def fixable_count(self) -> int:
        return len(self.fixable_issues())

    def score_grade(self) -> str:
        """スコアの段階評価（poor / fair / good）。"""
        if self.score < 40:
            return "poor"
        if self.score <= 70:
            return "fair"
        return "good"
